import re

from rest_framework import serializers

from .base import analysed_values
from .multichoice import IGNOREEMPTY, LINE_SEP, MultichoiceForm, MultichoiceItem, lines_from_textarea

VALUE_SEP = '####'
VALUE_SEP2 = '/'

LEADING_INT = re.compile(r'^\s*([+-]?\d+)')


def to_int(text):
    match = LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


class MultichoiceratedForm(MultichoiceForm):
    subtype = serializers.ChoiceField(
        choices=(('r', 'Multiple choice - single answer'),
                 ('d', 'Multiple choice - single answer allowed (dropdownlist)')),
        default='r', label='Multiple choice type',
    )
    values = serializers.CharField(
        style={'base_template': 'textarea.html'},
        label='Multiple choice values', help_text='One "value/text" pair per line',
    )

    def set_data(self, item):
        data = super().set_data(item)
        data['values'] = data['values'].replace(VALUE_SEP, VALUE_SEP2)
        return data

    def build_values(self, data):
        lines = []
        for line in lines_from_textarea(data['values']).split('\n'):
            if VALUE_SEP2 in line:
                value, text = line.split(VALUE_SEP2, 1)
                lines.append(f"{to_int(value)}{VALUE_SEP}{text}")
            else:
                lines.append(f"0{VALUE_SEP}{line}")
        return LINE_SEP.join(lines)


class MultichoiceratedItem(MultichoiceItem):
    """Multiple choice where every option carries a numeric rating."""
    type = 'multichoicerated'
    edit_form_class = MultichoiceratedForm

    def get_rated_options(self, item):
        rated = []
        for option in super().get_options(item):
            if VALUE_SEP in option:
                value, text = option.split(VALUE_SEP, 1)
                rated.append((to_int(value), text.strip()))
            else:
                rated.append((0, option))
        return rated

    def get_options(self, item):
        return [text for _value, text in self.get_rated_options(item)]

    def get_printval(self, item, value):
        rated = self.get_rated_options(item)
        return '; '.join(
            f"({rated[index - 1][0]}) {rated[index - 1][1]}"
            for index in self.selected_indexes(value) if index <= len(rated)
        )

    def get_analysed(self, item, groupid=0):
        values = analysed_values(item, groupid)
        if IGNOREEMPTY in item.options:
            values = [value for value in values if self.selected_indexes(value)]

        selections = [self.selected_indexes(value) for value in values]
        total = len(values)
        analysed = []
        for index, (rating, text) in enumerate(self.get_rated_options(item), start=1):
            count = sum(1 for selected in selections if index in selected)
            analysed.append({
                'value': rating,
                'answertext': text,
                'answercount': count,
                'quotient': count / total if total else 0,
            })
        return analysed
