from rest_framework import serializers

from .base import QuestionEditForm
from .textfield import TextfieldItem, split_pair

DEFAULT_WIDTH = 40
DEFAULT_HEIGHT = 5


class TextareaForm(QuestionEditForm):
    itemwidth = serializers.IntegerField(min_value=5, max_value=80, default=DEFAULT_WIDTH, label='Textarea width')
    itemheight = serializers.IntegerField(min_value=5, max_value=40, default=DEFAULT_HEIGHT, label='Textarea height')

    def set_data(self, item):
        data = super().set_data(item)
        data['itemwidth'], data['itemheight'] = split_pair(item.presentation, (DEFAULT_WIDTH, DEFAULT_HEIGHT))
        return data

    def build_presentation(self, data):
        return f"{data['itemwidth']}|{data['itemheight']}"


class TextareaItem(TextfieldItem):
    type = 'textarea'
    edit_form_class = TextareaForm

    def complete_form_element(self, item, form):
        width, height = split_pair(item.presentation, (DEFAULT_WIDTH, DEFAULT_HEIGHT))
        form.add_form_element(item, {
            'name': self.response_name(item),
            'type': 'textarea',
            'label': self.get_display_name(item),
            'cols': width,
            'rows': height,
        })
