import re

ARRAY_NAME = re.compile(r'^(?P<name>[^\[\]]+)\[(?P<index>[^\[\]]*)\]$')


def parse_responses(responses):
    """
    Turn the ``[{name, value}]`` pairs posted for a page into a dict keyed by
    element name. ``multichoice_5[2]`` style names are gathered into a dict of
    index -> value under ``multichoice_5``.
    """
    values = {}
    for response in responses:
        name = str(response['name'])
        value = response.get('value', '')
        match = ARRAY_NAME.match(name)
        if match:
            base = match.group('name')
            if not isinstance(values.get(base), dict):
                values[base] = {}
            values[base][match.group('index')] = value
        else:
            values[name] = value
    return values
