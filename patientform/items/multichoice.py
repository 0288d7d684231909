import re

from rest_framework import serializers

from .base import ItemHandler, QuestionEditForm, analysed_values

TYPE_SEP = '>>>>>'
LINE_SEP = '|'
ADJUST_SEP = '<<<<<'
IGNOREEMPTY = 'i'
HIDENOSELECT = 'h'

SUBTYPES = (
    ('r', 'Multiple choice - single answer'),
    ('c', 'Multiple choice - multiple answers'),
    ('d', 'Multiple choice - single answer allowed (dropdownlist)'),
)
ORIENTATIONS = (
    (0, 'vertical'),
    (1, 'horizontal'),
)

BLANK_LINES = re.compile(r'\n{2,}')


def split_presentation(presentation):
    """Split ``r>>>>>a|b<<<<<1`` into its subtype, value list and orientation."""
    if TYPE_SEP in presentation:
        subtype, values = presentation.split(TYPE_SEP, 1)
    else:
        subtype, values = 'r', presentation
    subtype = subtype or 'r'

    horizontal = False
    if subtype != 'd' and ADJUST_SEP in values:
        values, adjustment = values.split(ADJUST_SEP, 1)
        horizontal = adjustment == '1'
    return {'subtype': subtype, 'presentation': values, 'horizontal': horizontal}


def lines_from_textarea(text):
    text = text.replace('\r\n', '\n').replace('\r', '\n').strip()
    return BLANK_LINES.sub('\n', text)


class MultichoiceForm(QuestionEditForm):
    subtype = serializers.ChoiceField(choices=SUBTYPES, default='r', label='Multiple choice type')
    horizontal = serializers.ChoiceField(choices=ORIENTATIONS, default=0, label='Adjustment')
    hidenoselect = serializers.BooleanField(default=True, label='Hide the "Not selected" option')
    ignoreempty = serializers.BooleanField(default=False, label='Do not analyse empty submits')
    values = serializers.CharField(style={'base_template': 'textarea.html'}, label='Multiple choice values')

    separator = LINE_SEP

    def set_data(self, item):
        data = super().set_data(item)
        info = split_presentation(item.presentation)
        values = info['presentation'].replace(self.separator, '\n')
        data.update(
            subtype=info['subtype'],
            horizontal=1 if info['horizontal'] else 0,
            hidenoselect=HIDENOSELECT in item.options,
            ignoreempty=IGNOREEMPTY in item.options,
            values=BLANK_LINES.sub('\n', values),
        )
        return data

    def build_values(self, data):
        return lines_from_textarea(data['values']).replace('\n', self.separator)

    def build_presentation(self, data):
        subtype = (data.get('subtype') or 'r')[:1]
        presentation = self.build_values(data)
        if data.get('horizontal') == 1 and subtype != 'd':
            presentation += ADJUST_SEP + '1'
        return subtype + TYPE_SEP + presentation

    def build_options(self, data):
        options = ''
        if data.get('ignoreempty', False):
            options += IGNOREEMPTY
        if data.get('hidenoselect', True):
            options += HIDENOSELECT
        return options


class MultichoiceItem(ItemHandler):
    type = 'multichoice'
    edit_form_class = MultichoiceForm

    def get_info(self, item):
        return split_presentation(item.presentation)

    def get_options(self, item):
        """Option texts, the stored answer is the 1-based index into this list."""
        presentation = self.get_info(item)['presentation']
        if not presentation:
            return []
        return [option.strip() for option in presentation.split(LINE_SEP)]

    def selected_indexes(self, value):
        indexes = []
        for part in str(value or '').split(LINE_SEP):
            part = part.strip()
            if part.isdigit() and int(part) > 0:
                indexes.append(int(part))
        return indexes

    def complete_form_element(self, item, form):
        info = self.get_info(item)
        options = self.get_options(item)
        name = self.response_name(item)
        widget = {'r': 'radio', 'c': 'checkbox', 'd': 'select'}.get(info['subtype'], 'radio')

        choices = [{'value': str(index), 'label': text} for index, text in enumerate(options, start=1)]
        if widget == 'select' or (widget == 'radio' and HIDENOSELECT not in item.options):
            choices.insert(0, {'value': '0', 'label': 'Not selected'})

        form.add_form_element(item, {
            'name': name,
            'type': widget,
            'label': self.get_display_name(item),
            'options': choices,
            'horizontal': info['horizontal'],
            'emptyvalue': '0',
        })

        def validate_choice(values):
            raw = values.get(name)
            if isinstance(raw, dict):
                raw = LINE_SEP.join(str(v) for v in raw.values())
            for part in str(raw or '').split(LINE_SEP):
                part = part.strip()
                if not part or part == '0':
                    continue
                if not part.isdigit() or int(part) > len(options):
                    return {name: 'Invalid choice.'}
            return True

        form.add_validation_rule(validate_choice)

    def create_value(self, value):
        if isinstance(value, dict):
            value = list(value.values())
        if isinstance(value, (list, tuple)):
            return LINE_SEP.join(str(v).strip() for v in value if str(v).strip() not in ('', '0'))
        return super().create_value(value)

    def compare_value(self, item, dbvalue, dependvalue):
        options = self.get_options(item)
        for index in self.selected_indexes(dbvalue):
            if index <= len(options) and options[index - 1] == str(dependvalue).strip():
                return True
        return False

    def get_printval(self, item, value):
        options = self.get_options(item)
        return '; '.join(options[index - 1] for index in self.selected_indexes(value) if index <= len(options))

    def get_analysed(self, item, groupid=0):
        values = analysed_values(item, groupid)
        if IGNOREEMPTY in item.options:
            values = [value for value in values if self.selected_indexes(value)]

        selections = [self.selected_indexes(value) for value in values]
        total = len(values)
        analysed = []
        for index, text in enumerate(self.get_options(item), start=1):
            count = sum(1 for selected in selections if index in selected)
            analysed.append({
                'answertext': text,
                'answercount': count,
                'quotient': count / total if total else 0,
            })
        return analysed
