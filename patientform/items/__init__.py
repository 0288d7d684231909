from ..exceptions import UnknownItemType
from .captcha import CaptchaItem
from .label import LabelItem
from .multichoice import MultichoiceItem
from .multichoicerated import MultichoiceratedItem
from .numeric import NumericItem
from .pagebreak import PagebreakItem
from .textarea import TextareaItem
from .textfield import TextfieldItem

ITEM_HANDLERS = {
    handler.type: handler
    for handler in (
        MultichoiceItem(),
        MultichoiceratedItem(),
        CaptchaItem(),
        TextfieldItem(),
        TextareaItem(),
        NumericItem(),
        LabelItem(),
        PagebreakItem(),
    )
}


def get_item_handler(typ):
    try:
        return ITEM_HANDLERS[typ]
    except KeyError:
        raise UnknownItemType(typ)


def register_item_handler(handler):
    ITEM_HANDLERS[handler.type] = handler
    return handler
