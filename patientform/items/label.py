from rest_framework import serializers

from .base import DependentItemEditForm, ItemHandler


class LabelForm(DependentItemEditForm):
    presentation = serializers.CharField(style={'base_template': 'textarea.html'}, allow_blank=True, default='', label='Contents')

    def set_data(self, item):
        data = super().set_data(item)
        data['presentation'] = item.presentation
        return data

    def build_presentation(self, data):
        return data.get('presentation', '')


class LabelItem(ItemHandler):
    """Static text between questions."""
    type = 'label'
    edit_form_class = LabelForm
    hasvalue = False

    def get_display_name(self, item, withpostfix=True):
        return ''

    def complete_form_element(self, item, form):
        form.add_form_element(item, {
            'name': self.response_name(item),
            'type': 'static',
            'label': '',
            'value': item.presentation,
        }, addrequiredrule=False)

    def create_value(self, value):
        return ''

    def get_printval(self, item, value):
        return ''
