"""
Shared pieces of the item types.

Every item type is a pair: an edit form (a DRF serializer describing the
fields a teacher fills in and how they are packed into ``Item.presentation``)
and a handler (how the item is completed, stored, printed and analysed).
"""
import json

from django.db import transaction
from django.db.models import Max
from rest_framework import serializers

from ..models import Item, Value


def field_type(field):
    if isinstance(field, serializers.BooleanField):
        return 'checkbox'
    if isinstance(field, serializers.ChoiceField):
        return 'select'
    if isinstance(field, serializers.IntegerField):
        return 'int'
    if field.style.get('base_template') == 'textarea.html':
        return 'textarea'
    return 'text'


class ItemEditForm(serializers.Serializer):
    """Base edit form. Subclasses add their fields and pack them into a presentation string."""
    position = serializers.IntegerField(min_value=1, required=False, label='Position')

    def __init__(self, *args, item=None, patientform=None, **kwargs):
        self.item = item
        self.patientform = patientform if patientform is not None else getattr(item, 'patientform', None)
        super().__init__(*args, **kwargs)

    def set_data(self, item):
        """Values of the form fields for an existing ``item``."""
        return {'position': item.position}

    def definition(self):
        """Field descriptors of the form, filled with the values of the edited item."""
        initial = self.set_data(self.item) if self.item is not None else {}
        descriptors = []
        for name, field in self.fields.items():
            if name in initial:
                value = initial[name]
            elif field.default is not serializers.empty:
                value = field.default
            else:
                value = None
            descriptor = {
                'name': name,
                'label': str(field.label or name),
                'type': field_type(field),
                'value': value,
            }
            if isinstance(field, serializers.ChoiceField):
                descriptor['choices'] = [
                    {'value': key, 'label': str(label)} for key, label in field.choices.items()
                ]
            descriptors.append(descriptor)
        return descriptors

    def build_presentation(self, data):
        return ''

    def build_options(self, data):
        return ''

    def get_data(self):
        """Item fields parsed out of the validated form, including ``presentation``."""
        data = dict(self.validated_data)
        item_data = {key: data[key] for key in ('position', 'name', 'label', 'required', 'dependvalue') if key in data}
        if 'dependitem' in data:
            item_data['dependitem'] = data['dependitem']
        item_data['presentation'] = self.build_presentation(data)
        item_data['options'] = self.build_options(data)
        return item_data


class DependentItemEditForm(ItemEditForm):
    """Edit form of items that may only show when another item has a given answer."""
    dependitem = serializers.IntegerField(required=False, default=0, label='Dependence item')
    dependvalue = serializers.CharField(max_length=255, required=False, allow_blank=True, default='', label='Dependence value')

    def set_data(self, item):
        data = super().set_data(item)
        data['dependitem'] = item.dependitem_id or 0
        data['dependvalue'] = item.dependvalue
        return data

    def validate_dependitem(self, value):
        if not value:
            return 0
        items = Item.objects.filter(patientform=self.patientform, id=value, hasvalue=True)
        if self.item is not None:
            items = items.exclude(id=self.item.id)
        if not items.exists():
            raise serializers.ValidationError("The dependence item must be another question of this patient form.")
        return value


class QuestionEditForm(DependentItemEditForm):
    required = serializers.BooleanField(default=False, label='Required')
    name = serializers.CharField(max_length=255, required=False, allow_blank=True, default='', label='Question')
    label = serializers.CharField(max_length=255, required=False, allow_blank=True, default='', label='Label')

    def set_data(self, item):
        data = super().set_data(item)
        data.update(required=item.required, name=item.name, label=item.label)
        return data


def analysed_values(item, groupid=0):
    """Stored answers of ``item`` across finalized attempts, optionally for one group."""
    values = Value.objects.filter(item=item).order_by('completed_id', 'id')
    if groupid:
        values = values.filter(completed__groups__id=groupid)
    return list(values.values_list('value', flat=True))


class ItemHandler:
    """
    Behaviour of one item type. Handlers are stateless singletons looked up
    by type tag in the registry, so everything they need comes in as arguments.
    """
    type = None
    edit_form_class = ItemEditForm
    hasvalue = True

    def get_hasvalue(self):
        return self.hasvalue

    def can_display(self, item):
        return True

    # --- Editing ---

    def build_editform(self, item, patientform, data=None):
        if data is None:
            return self.edit_form_class(item=item, patientform=patientform)
        return self.edit_form_class(data=data, item=item, patientform=patientform)

    @transaction.atomic
    def save_item(self, form):
        data = form.get_data()
        position = data.pop('position', None)
        dependitem = data.pop('dependitem', 0)

        item = form.item
        if item is None:
            last = form.patientform.items.aggregate(last=Max('position'))['last'] or 0
            item = Item(patientform=form.patientform, typ=self.type, position=last + 1)
        for key, value in data.items():
            setattr(item, key, value)
        item.dependitem_id = dependitem or None
        item.hasvalue = self.get_hasvalue()
        item.save()

        if position and position != item.position:
            move_item(item, position)
        return item

    # --- Completing ---

    def response_name(self, item):
        return f"{item.typ}_{item.id}"

    def get_display_name(self, item, withpostfix=True):
        name = item.name
        if withpostfix and item.label:
            name = f"{name} ({item.label})"
        return name

    def complete_form_element(self, item, form):
        form.add_form_element(item, {
            'name': self.response_name(item),
            'type': 'text',
            'label': self.get_display_name(item),
        })

    def create_value(self, value):
        if value is None:
            return ''
        return str(value).strip()

    def compare_value(self, item, dbvalue, dependvalue):
        return str(dbvalue).strip() == str(dependvalue).strip()

    # --- Reporting ---

    def get_printval(self, item, value):
        return '' if value is None else str(value)

    def get_data_for_external(self, item):
        return None

    def get_analysed(self, item, groupid=0):
        return []

    def get_analysed_for_external(self, item, groupid=0):
        return [json.dumps(row) if isinstance(row, (dict, list)) else str(row)
                for row in self.get_analysed(item, groupid)]


def move_item(item, position):
    """Move ``item`` to ``position`` and renumber the other items of its form."""
    items = list(item.patientform.items.exclude(id=item.id).order_by('position', 'id'))
    position = max(1, min(position, len(items) + 1))
    items.insert(position - 1, item)
    renumber(items)


def renumber(items):
    for index, each in enumerate(items, start=1):
        if each.position != index:
            each.position = index
            each.save(update_fields=['position'])
