import json
import math

from rest_framework import serializers

from .base import ItemHandler, QuestionEditForm, analysed_values


def to_float(value):
    """Parse a user supplied number, accepting a decimal comma. None when empty."""
    text = str(value).strip().replace(',', '.') if value is not None else ''
    if text == '':
        return None
    if '_' in text:
        raise ValueError(f"Not a number: {text}")
    number = float(text)
    if not math.isfinite(number):
        raise ValueError(f"Not a finite number: {text}")
    return number


def format_number(number):
    return str(int(number)) if number.is_integer() else str(number)


def get_range(item):
    parts = item.presentation.split('|') if item.presentation else []
    bounds = []
    for index in range(2):
        try:
            bounds.append(to_float(parts[index]) if len(parts) > index else None)
        except ValueError:
            bounds.append(None)
    return bounds


class NumericForm(QuestionEditForm):
    rangefrom = serializers.CharField(max_length=20, required=False, allow_blank=True, default='', label='Range from')
    rangeto = serializers.CharField(max_length=20, required=False, allow_blank=True, default='', label='Range to')

    def set_data(self, item):
        data = super().set_data(item)
        parts = item.presentation.split('|') if item.presentation else []
        data['rangefrom'] = parts[0] if len(parts) > 0 else ''
        data['rangeto'] = parts[1] if len(parts) > 1 else ''
        return data

    def validate_rangefrom(self, value):
        return self._validate_bound(value)

    def validate_rangeto(self, value):
        return self._validate_bound(value)

    def _validate_bound(self, value):
        try:
            number = to_float(value)
        except ValueError:
            raise serializers.ValidationError("Enter a number.")
        return '' if number is None else value.strip().replace(',', '.')

    def validate(self, attrs):
        low, high = to_float(attrs.get('rangefrom')), to_float(attrs.get('rangeto'))
        if low is not None and high is not None and low > high:
            raise serializers.ValidationError({'rangeto': "The upper bound must not be below the lower bound."})
        return attrs

    def build_presentation(self, data):
        return f"{data.get('rangefrom', '')}|{data.get('rangeto', '')}"


class NumericItem(ItemHandler):
    type = 'numeric'
    edit_form_class = NumericForm

    def complete_form_element(self, item, form):
        name = self.response_name(item)
        low, high = get_range(item)
        form.add_form_element(item, {
            'name': name,
            'type': 'text',
            'label': self.get_display_name(item),
            'min': low,
            'max': high,
        })

        def validate_number(values):
            try:
                number = to_float(values.get(name))
            except ValueError:
                return {name: 'Invalid number.'}
            if number is None:
                return True
            if (low is not None and number < low) or (high is not None and number > high):
                if low is not None and high is not None:
                    return {name: f"Enter a number between {low:g} and {high:g}."}
                if low is not None:
                    return {name: f"Enter a number of at least {low:g}."}
                return {name: f"Enter a number of at most {high:g}."}
            return True

        form.add_validation_rule(validate_number)

    def create_value(self, value):
        try:
            number = to_float(value)
        except ValueError:
            return ''
        return '' if number is None else format_number(number)

    def compare_value(self, item, dbvalue, dependvalue):
        try:
            return to_float(dbvalue) == to_float(dependvalue)
        except ValueError:
            return False

    def get_analysed(self, item, groupid=0):
        numbers = []
        for value in analysed_values(item, groupid):
            try:
                number = to_float(value)
            except ValueError:
                continue
            if number is not None:
                numbers.append(number)
        return numbers

    def get_analysed_for_external(self, item, groupid=0):
        numbers = self.get_analysed(item, groupid)
        if not numbers:
            return []
        data = [format_number(number) for number in numbers]
        data.append(json.dumps({'avg': sum(numbers) / len(numbers)}))
        return data
