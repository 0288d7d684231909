from rest_framework import serializers

from .base import ItemHandler, QuestionEditForm, analysed_values

DEFAULT_SIZE = 30
DEFAULT_MAXLENGTH = 255


def split_pair(presentation, defaults):
    parts = presentation.split('|') if presentation else []
    first = int(parts[0]) if len(parts) > 0 and parts[0].strip().isdigit() else defaults[0]
    second = int(parts[1]) if len(parts) > 1 and parts[1].strip().isdigit() else defaults[1]
    return first, second


class TextfieldForm(QuestionEditForm):
    itemsize = serializers.IntegerField(min_value=1, max_value=255, default=DEFAULT_SIZE, label='Textfield width')
    itemmaxlength = serializers.IntegerField(min_value=1, max_value=255, default=DEFAULT_MAXLENGTH, label='Textfield maxlength')

    def set_data(self, item):
        data = super().set_data(item)
        data['itemsize'], data['itemmaxlength'] = split_pair(item.presentation, (DEFAULT_SIZE, DEFAULT_MAXLENGTH))
        return data

    def build_presentation(self, data):
        return f"{data['itemsize']}|{data['itemmaxlength']}"


class TextfieldItem(ItemHandler):
    type = 'textfield'
    edit_form_class = TextfieldForm

    def complete_form_element(self, item, form):
        name = self.response_name(item)
        size, maxlength = split_pair(item.presentation, (DEFAULT_SIZE, DEFAULT_MAXLENGTH))
        form.add_form_element(item, {
            'name': name,
            'type': 'text',
            'label': self.get_display_name(item),
            'size': size,
            'maxlength': maxlength,
        })

        def validate_length(values):
            if len(str(values.get(name) or '')) > maxlength:
                return {name: f"Maximum {maxlength} characters."}
            return True

        form.add_validation_rule(validate_length)

    def get_analysed(self, item, groupid=0):
        return [value for value in analysed_values(item, groupid) if value]
