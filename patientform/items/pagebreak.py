from rest_framework import serializers

from .base import ItemEditForm, ItemHandler


class PagebreakForm(ItemEditForm):
    pass


class PagebreakItem(ItemHandler):
    """Splits the items of a form into pages, never shown itself."""
    type = 'pagebreak'
    edit_form_class = PagebreakForm
    hasvalue = False

    def can_display(self, item):
        return False

    def build_editform(self, item, patientform, data=None):
        if item is None or not item.pk:
            last = patientform.items.order_by('-position', '-id').first()
            if last is None:
                raise serializers.ValidationError({'typ': 'A page break cannot be the first item.'})
            if last.typ == self.type:
                raise serializers.ValidationError({'typ': 'A page break cannot follow another page break.'})
        return super().build_editform(item, patientform, data={} if data is None else data)

    def get_display_name(self, item, withpostfix=True):
        return ''

    def complete_form_element(self, item, form):
        pass

    def create_value(self, value):
        return ''

    def get_printval(self, item, value):
        return ''
