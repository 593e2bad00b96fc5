"""
Discount descriptor parsing for the food order pipeline.

`Discounts_and_Offers` is free text such as "10% off", "5% on App" or
"50 off Promo". Each descriptor is parsed into a tagged result:

    ParsedDiscount(DiscountType.PERCENTAGE, 10.0)
    ParsedDiscount(DiscountType.FIXED, 50.0)
    ParsedDiscount(DiscountType.NONE, 0.0)

Anything that does not match one of the two layouts exactly parses to NONE.
"""
import logging
import re
import traceback
from enum import Enum
from typing import NamedTuple

import numpy as np

logger = logging.getLogger(__name__)

# Number directly in front of the first percent sign
PERCENTAGE_PATTERN = re.compile(r'^[^%]*?(?<![\d.\-])(\d+(?:\.\d+)?)\s*%')
# Leading number, whitespace, then "off" somewhere after it
FIXED_PATTERN = re.compile(r'^\s*(\d+(?:\.\d+)?)\s+.*off', re.IGNORECASE)


class DiscountType(str, Enum):
    PERCENTAGE = 'percentage'
    FIXED = 'fixed'
    NONE = 'none'


class ParsedDiscount(NamedTuple):
    type: DiscountType
    value: float


NO_DISCOUNT = ParsedDiscount(DiscountType.NONE, 0.0)


def parse_discount(descriptor):
    """
    Parse a discount descriptor.

    A descriptor containing '%' is a percentage discount only if a number
    sits right before the first '%'; it never falls through to the fixed
    rule. Never raises.
    """
    if descriptor is None or not isinstance(descriptor, str):
        return NO_DISCOUNT

    text = descriptor.strip()
    if not text:
        return NO_DISCOUNT

    if '%' in text:
        match = PERCENTAGE_PATTERN.match(text)
        if match:
            return ParsedDiscount(DiscountType.PERCENTAGE, float(match.group(1)))
        return NO_DISCOUNT

    if 'off' in text.lower():
        match = FIXED_PATTERN.match(text)
        if match:
            return ParsedDiscount(DiscountType.FIXED, float(match.group(1)))

    return NO_DISCOUNT


def add_discount_columns(df):
    """
    Derive Discount_Value, Discount_Type and Discount_Amount from the
    free-text descriptor.

    Args:
        df (DataFrame): Orders with Order_Value and Discounts_and_Offers

    Returns:
        DataFrame: Copy of the orders with the discount columns added
    """
    try:
        logger.info("Parsing discount descriptors")

        df = df.copy()
        parsed = df['Discounts_and_Offers'].map(parse_discount)

        df['Discount_Value'] = parsed.map(lambda d: d.value).astype('float64')
        df['Discount_Type'] = parsed.map(lambda d: d.type.value)

        # percentage of order value, the fixed value, or zero
        df['Discount_Amount'] = np.select(
            [
                df['Discount_Type'] == DiscountType.PERCENTAGE.value,
                df['Discount_Type'] == DiscountType.FIXED.value
            ],
            [
                df['Order_Value'] * df['Discount_Value'] / 100,
                df['Discount_Value']
            ],
            default=0.0
        )

        type_counts = df['Discount_Type'].value_counts().to_dict()
        logger.info(f"Discount types: {type_counts}")

        unparsed = df['Discounts_and_Offers'].notna() & (df['Discount_Type'] == DiscountType.NONE.value)
        if unparsed.any():
            examples = df.loc[unparsed, 'Discounts_and_Offers'].unique()[:5].tolist()
            logger.warning(
                f"{int(unparsed.sum())} discount descriptors did not match a known layout "
                f"and were treated as no discount, e.g. {examples}"
            )

        return df
    except Exception as e:
        logger.error(f"Error parsing discounts: {str(e)}")
        logger.error(traceback.format_exc())
        raise
