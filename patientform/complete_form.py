"""
The form of one page of a patient form.

Item handlers add their elements and validation rules to it; the completion
controller validates the posted values against it.
"""
from .items import get_item_handler


class CompleteForm:
    def __init__(self, items=(), remoteip=None):
        self.remoteip = remoteip
        self.items = list(items)
        self.elements = []
        self.rules = []
        for item in self.items:
            get_item_handler(item.typ).complete_form_element(item, self)

    def add_form_element(self, item, element, addrequiredrule=True):
        element = dict(element)
        element['itemid'] = item.id
        element['required'] = bool(addrequiredrule and item.required)
        self.elements.append(element)
        return element

    def add_validation_rule(self, rule):
        """``rule(values)`` returns True or a dict of element name -> message."""
        self.rules.append(rule)

    def get_form_element(self, name):
        for element in self.elements:
            if element['name'] == name:
                return element
        return None

    def is_empty_value(self, element, value):
        if value is None:
            return True
        if isinstance(value, dict):
            return not any(not self.is_empty_value(element, each) for each in value.values())
        value = str(value).strip()
        return value == '' or value == element.get('emptyvalue')

    def validate(self, values):
        """Errors as a dict of element name -> message, empty when valid."""
        errors = {}
        for element in self.elements:
            if element['required'] and self.is_empty_value(element, values.get(element['name'])):
                errors[element['name']] = 'Required'
        for rule in self.rules:
            result = rule(values)
            if result is not True:
                for name, message in result.items():
                    errors.setdefault(name, message)
        return errors
