"""
Mapping between EPrint label type codes and the stored label format / size.

Every LabelTypeCode has an entry: an unknown code is a configuration error,
never silently mapped to a default.
"""

from typing import Dict, Tuple

from dpd_gateway.core.exceptions import ExceptionFactory
from dpd_gateway.models.shipment import LabelFormat, LabelSize
from dpd_gateway.schemas.dpd_configuration_schema import LabelTypeCode


# EPrint label type -> (format, size)
LABEL_FORMAT_AND_SIZE: Dict[LabelTypeCode, Tuple[LabelFormat, LabelSize]] = {
    LabelTypeCode.PNG: (LabelFormat.PNG, LabelSize.A5),
    LabelTypeCode.PDF: (LabelFormat.PDF, LabelSize.A4),
    LabelTypeCode.PDF_A6: (LabelFormat.PDF, LabelSize.A6),
    LabelTypeCode.ZPL: (LabelFormat.ZPL, LabelSize.A5),
    LabelTypeCode.ZPL300: (LabelFormat.ZPL, LabelSize.A5),
    LabelTypeCode.ZPL_A6: (LabelFormat.ZPL, LabelSize.A6),
    LabelTypeCode.ZPL300_A6: (LabelFormat.ZPL, LabelSize.A6),
    LabelTypeCode.EPL: (LabelFormat.EPL, LabelSize.A5),
}


def get_label_format_and_size(label_type: LabelTypeCode) -> Tuple[LabelFormat, LabelSize]:
    """Return the (format, size) pair of an EPrint label type.

    Raises ConfigurationException for codes outside the catalog.
    """
    try:
        return LABEL_FORMAT_AND_SIZE[LabelTypeCode(label_type)]
    except (KeyError, ValueError):
        raise ExceptionFactory.unknown_label_type(label_type)
