from datetime import timedelta

import pytest
from django.utils import timezone

from courses.models import Enrolment
from patientform.completion import PatientFormCompletion
from patientform.exceptions import (
    AccessDenied, AlreadySubmitted, EmptyFormError, InvalidPage, NotOpenError, NotStarted,
)
from patientform.items import get_item_handler
from patientform.models import (
    ActivityCompletion, Completed, CompletedTmp, SubmissionTracking, Value, ValueTmp,
)


def answer(item, value):
    return {'name': f"{item.typ}_{item.id}", 'value': value}


@pytest.fixture
def three_item_form(make_form, add_item):
    """Text question, multichoice on page two, captcha alone on page three."""
    patientform = make_form(anonymous=2)
    item1 = add_item(patientform, 'textfield', name='How do you feel?', presentation='30|255', required=True)
    add_item(patientform, 'pagebreak')
    item2 = add_item(patientform, 'multichoice', name='Pick one', presentation='r>>>>>A|B')
    add_item(patientform, 'pagebreak')
    item3 = add_item(patientform, 'captcha', name='Captcha', required=True)
    return patientform, item1, item2, item3


def test_three_item_scenario(three_item_form, student):
    patientform, item1, item2, item3 = three_item_form
    assert item3.hasvalue is False

    completion = PatientFormCompletion(patientform, student)
    completion.open_or_resume()
    assert completion.get_resume_page() == 0
    assert completion.get_page(0) == [item1]

    result = completion.process_page(0, [answer(item1, 'hi')])
    assert (result.jumpto, result.completed, result.errors) == (1, False, [])

    page = completion.get_page(1)
    assert page == [item2]
    assert get_item_handler('multichoice').get_options(page[0]) == ['A', 'B']

    result = completion.process_page(1, [answer(item2, '1')])
    assert result.completed is True
    assert result.jumpto == 0

    completed = Completed.objects.get(patientform=patientform)
    assert completed.user == student
    assert dict(completed.values.values_list('item_id', 'value')) == {item1.id: 'hi', item2.id: '1'}
    assert not CompletedTmp.objects.filter(patientform=patientform).exists()


def test_pages_partition_items(make_form, add_item, student):
    patientform = make_form()
    questions = []
    for _ in range(3):
        questions.append(add_item(patientform, 'textfield', presentation='30|255'))
        questions.append(add_item(patientform, 'label', presentation='note'))
        add_item(patientform, 'pagebreak')
    questions.append(add_item(patientform, 'textarea', presentation='40|5'))

    pages = PatientFormCompletion(patientform, student).get_pages()
    assert len(pages) == 4
    flattened = [item for page in pages for item in page]
    assert flattened == questions
    assert all(item.typ != 'pagebreak' for item in flattened)


@pytest.fixture
def dependent_form(make_form, add_item):
    patientform = make_form()
    question = add_item(patientform, 'multichoice', name='Smoker?', presentation='r>>>>>yes|no')
    add_item(patientform, 'pagebreak')
    followup = add_item(patientform, 'textfield', name='How many a day?', presentation='30|255',
                        dependitem=question, dependvalue='yes')
    add_item(patientform, 'pagebreak')
    last = add_item(patientform, 'textfield', name='Anything else?', presentation='30|255')
    return patientform, question, followup, last


def test_dependent_item_hidden_when_answer_differs(dependent_form, student):
    patientform, question, followup, last = dependent_form
    completion = PatientFormCompletion(patientform, student)
    completion.open_or_resume()
    completion.process_page(0, [answer(question, '2')])

    assert completion.get_page(1) == []
    assert completion.get_next_page(0) == 2
    assert completion.get_previous_page(2) == 0


def test_dependent_item_shown_when_answer_matches(dependent_form, student):
    patientform, question, followup, last = dependent_form
    completion = PatientFormCompletion(patientform, student)
    completion.open_or_resume()
    result = completion.process_page(0, [answer(question, '1')])

    assert result.jumpto == 1
    assert completion.get_page(1) == [followup]


def test_dependency_on_same_page_is_ignored(make_form, add_item, student):
    patientform = make_form()
    question = add_item(patientform, 'multichoice', presentation='r>>>>>yes|no')
    followup = add_item(patientform, 'textfield', presentation='30|255', dependitem=question, dependvalue='yes')

    completion = PatientFormCompletion(patientform, student)
    assert completion.can_see_item(followup) is None
    assert completion.get_page(0) == [question, followup]


def test_next_page_skips_empty_pages_and_records_jump(make_form, add_item, student):
    patientform = make_form()
    add_item(patientform, 'textfield', presentation='30|255')
    add_item(patientform, 'pagebreak')
    add_item(patientform, 'captcha')
    add_item(patientform, 'pagebreak')
    add_item(patientform, 'textfield', presentation='30|255')

    completion = PatientFormCompletion(patientform, student)
    assert completion.get_next_page(0) == 2
    assert completion.jumpto is None
    assert completion.get_next_page(0, peek_only=False) == 2
    assert completion.jumpto == 2
    assert completion.get_next_page(2) is None
    assert completion.get_previous_page(0) is None


def test_resume_page_is_first_unanswered(dependent_form, student):
    patientform, question, followup, last = dependent_form
    completion = PatientFormCompletion(patientform, student)
    completion.open_or_resume()
    completion.process_page(0, [answer(question, '1')])

    assert PatientFormCompletion(patientform, student).get_resume_page() == 1


def test_validation_errors_leave_state_untouched(three_item_form, student):
    patientform, item1, item2, item3 = three_item_form
    completion = PatientFormCompletion(patientform, student)
    completion.open_or_resume()

    result = completion.process_page(0, [answer(item1, '')])
    assert result.jumpto == 0
    assert result.completed is False
    assert result.errors == [{
        'item': f"textfield_{item1.id}",
        'itemid': item1.id,
        'warningcode': 'invalidvalue',
        'message': 'Required',
    }]
    assert not ValueTmp.objects.exists()


def test_going_back_saves_without_validation(three_item_form, student):
    patientform, item1, item2, item3 = three_item_form
    item2.required = True
    item2.save()
    completion = PatientFormCompletion(patientform, student)
    completion.open_or_resume()
    completion.process_page(0, [answer(item1, 'hi')])

    result = completion.process_page(1, [], goprevious=True)
    assert (result.jumpto, result.completed) == (0, False)
    assert ValueTmp.objects.get(item=item2).value == ''


def test_invalid_page(three_item_form, student):
    patientform = three_item_form[0]
    with pytest.raises(InvalidPage):
        PatientFormCompletion(patientform, student).get_page(7)


@pytest.mark.parametrize('multiple_submit', [False, True])
def test_concurrent_final_submit(make_form, add_item, student, multiple_submit):
    patientform = make_form(multiple_submit=multiple_submit)
    item = add_item(patientform, 'textfield', presentation='30|255')

    first = PatientFormCompletion(patientform, student)
    second = PatientFormCompletion(patientform, student)
    first.open_or_resume()
    second.open_or_resume()

    assert first.process_page(0, [answer(item, 'one')]).completed is True
    with pytest.raises(AlreadySubmitted):
        second.process_page(0, [answer(item, 'two')])

    assert Completed.objects.filter(patientform=patientform).count() == 1
    assert Value.objects.get(item=item).value == 'one'


def test_finalize_twice_is_refused(make_form, add_item, student):
    patientform = make_form()
    item = add_item(patientform, 'textfield', presentation='30|255')
    completion = PatientFormCompletion(patientform, student)
    completion.open_or_resume()
    completion.save_response_tmp([item], {f"textfield_{item.id}": 'x'})
    stale = PatientFormCompletion(patientform, student)
    stale.get_current_completed_tmp()

    completion.finalize()
    with pytest.raises(AlreadySubmitted):
        stale.finalize()


def test_anonymous_submission_drops_user(make_form, add_item, student, make_group):
    group = make_group('Ward A', members=[student])
    patientform = make_form(completion_submit=True)
    item = add_item(patientform, 'textfield', presentation='30|255')

    completion = PatientFormCompletion(patientform, student)
    completion.open_or_resume()
    completion.process_page(0, [answer(item, 'secret')])

    completed = Completed.objects.get(patientform=patientform)
    assert completed.user is None
    assert completed.anonymous_response is True
    assert completed.random_response == 1
    assert list(completed.groups.all()) == [group]
    assert SubmissionTracking.objects.filter(patientform=patientform, user=student).exists()
    assert ActivityCompletion.objects.get(patientform=patientform, user=student).completed is True

    assert completion.is_already_submitted()
    assert completion.find_last_completed() is None
    with pytest.raises(AlreadySubmitted):
        completion.open_or_resume()


def test_multiple_submit_keeps_every_record(make_form, add_item, student):
    patientform = make_form(anonymous=2, multiple_submit=True)
    item = add_item(patientform, 'textfield', presentation='30|255')

    for value in ['first', 'second']:
        completion = PatientFormCompletion(patientform, student)
        completion.open_or_resume()
        completion.process_page(0, [answer(item, value)])

    assert Completed.objects.filter(patientform=patientform, user=student).count() == 2
    last = PatientFormCompletion(patientform, student).find_last_completed()
    assert last.values.get().value == 'second'


def test_open_or_resume_preconditions(make_form, add_item, student, make_user, course, enrol):
    patientform = make_form()
    with pytest.raises(EmptyFormError):
        PatientFormCompletion(patientform, student).open_or_resume()

    add_item(patientform, 'textfield', presentation='30|255')
    teacher = enrol(make_user(), course, Enrolment.Role.TEACHER)
    with pytest.raises(AccessDenied):
        PatientFormCompletion(patientform, teacher).open_or_resume()

    patientform.timeclose = timezone.now() - timedelta(days=1)
    patientform.save()
    with pytest.raises(NotOpenError):
        PatientFormCompletion(patientform, student).open_or_resume()

    later = timezone.now() - timedelta(days=2)
    assert PatientFormCompletion(patientform, student, now=later).open_or_resume().user == student


def test_only_pagebreaks_is_empty(make_form, add_item, student):
    patientform = make_form()
    add_item(patientform, 'pagebreak')
    assert PatientFormCompletion(patientform, student).is_empty()
    add_item(patientform, 'label', presentation='hello')
    assert not PatientFormCompletion(patientform, student).is_empty()


def test_set_module_viewed(make_form, student):
    patientform = make_form()
    PatientFormCompletion(patientform, student).set_module_viewed()
    assert ActivityCompletion.objects.get(patientform=patientform, user=student).viewed is True


def test_autonumbering_counts_value_items(make_form, add_item, student):
    patientform = make_form()
    add_item(patientform, 'label', presentation='intro')
    add_item(patientform, 'textfield', presentation='30|255')
    add_item(patientform, 'pagebreak')
    add_item(patientform, 'numeric', presentation='|')

    items = PatientFormCompletion(patientform, student).get_items()
    assert [item.itemnr for item in items] == [None, 1, None, 2]


@pytest.fixture
def two_page_form(make_form, add_item):
    patientform = make_form(anonymous=2, multiple_submit=True)
    first = add_item(patientform, 'textfield', name='Name', presentation='30|255', required=True)
    add_item(patientform, 'pagebreak')
    second = add_item(patientform, 'textfield', name='Notes', presentation='30|255')
    return patientform, first, second


def test_pages_need_a_launched_attempt(two_page_form, student):
    patientform, first, second = two_page_form
    with pytest.raises(NotStarted):
        PatientFormCompletion(patientform, student).process_page(0, [answer(first, 'Ann')])
    assert not CompletedTmp.objects.exists()


def test_replaying_the_last_page_after_submit_is_refused(two_page_form, student):
    patientform, first, second = two_page_form
    completion = PatientFormCompletion(patientform, student)
    completion.open_or_resume()
    completion.process_page(0, [answer(first, 'Ann')])
    assert completion.process_page(1, [answer(second, 'ok')]).completed is True

    with pytest.raises(AlreadySubmitted):
        PatientFormCompletion(patientform, student).process_page(1, [answer(second, 'x')])

    completed = Completed.objects.get(patientform=patientform)
    assert dict(completed.values.values_list('item_id', 'value')) == {first.id: 'Ann', second.id: 'ok'}
    assert not CompletedTmp.objects.exists()


def test_jumping_to_the_last_page_sends_back_to_required_items(two_page_form, student):
    patientform, first, second = two_page_form
    completion = PatientFormCompletion(patientform, student)
    completion.open_or_resume()

    result = completion.process_page(1, [answer(second, 'x')])
    assert (result.jumpto, result.completed) == (0, False)
    assert result.errors[0]['itemid'] == first.id
    assert not Completed.objects.exists()
    assert ValueTmp.objects.get(item=second).value == 'x'
