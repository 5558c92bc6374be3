#!/usr/bin/env python3
"""
Template Formatting Helpers
Number formatting (currency, human readable sizes, percentages), quantity
to number extraction, price formatting and string case conversion, all
registered as Jinja2 filters and global functions by the report renderer.
"""

from typing import Any, Callable, Dict

from report_errors import TemplateRenderError

HUMAN_UNITS = [
    (1e15, " Quadrillion"),
    (1e12, " Trillion"),
    (1e9, " Billion"),
    (1e6, " Million"),
    (1e3, " Thousand"),
]

SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB", "PB"]


def _to_number(value: Any) -> float:
    if isinstance(value, bool):
        raise TemplateRenderError(f"Invalid number: {value}")
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except ValueError as e:
        raise TemplateRenderError(f"Invalid number: {value}") from e


def format_number(number: float, precision: int = 0, delimiter: str = "", separator: str = ".") -> str:
    """Fixed-precision number with a thousands delimiter and decimal separator."""
    formatted = f"{abs(number):.{precision}f}"
    integer, _, decimals = formatted.partition(".")

    if delimiter:
        groups = []
        while len(integer) > 3:
            groups.insert(0, integer[-3:])
            integer = integer[:-3]
        groups.insert(0, integer)
        integer = delimiter.join(groups)

    result = "-" + integer if number < 0 else integer
    if precision > 0:
        result += separator + decimals
    return result


def number_to_currency(value: Any, precision: int = 2, unit: str = "$", delimiter: str = ",",
                       separator: str = ".", format: str = "%u%n",
                       negative_format: str = "-%u%n") -> str:
    """Format a number as currency, e.g. 1234.567 -> '$1,234.57'."""
    number = _to_number(value)
    formatted = format_number(abs(number), precision, delimiter, separator)
    template = negative_format if number < 0 else format
    return template.replace("%u", unit).replace("%n", formatted)


def number_to_human(value: Any, precision: int = 3, separator: str = ".", delimiter: str = "") -> str:
    """Format a large number with a word unit, e.g. 1234567 -> '1.235 Million'."""
    number = _to_number(value)
    magnitude = abs(number)
    sign = "-" if number < 0 else ""

    for threshold, unit in HUMAN_UNITS:
        if magnitude >= threshold:
            return f"{sign}{format_number(magnitude / threshold, precision, delimiter, separator)}{unit}"
    return f"{sign}{format_number(magnitude, precision, delimiter, separator)}"


def number_to_human_size(value: Any, precision: int = 3, separator: str = ".", delimiter: str = "") -> str:
    """Format a byte count, e.g. 1234 -> '1.205 KB'."""
    number = _to_number(value)
    if number < 0:
        raise TemplateRenderError("Size cannot be negative")

    exponent = 0
    while exponent < len(SIZE_UNITS) - 1 and number >= 1024 ** (exponent + 1):
        exponent += 1

    formatted = format_number(number / 1024 ** exponent, precision, delimiter, separator)
    if formatted.endswith(".000"):
        formatted = formatted[:-4]
    return f"{formatted} {SIZE_UNITS[exponent]}"


def number_to_percentage(value: Any, precision: int = 3, separator: str = ".", delimiter: str = "",
                         format: str = "%n%") -> str:
    number = _to_number(value)
    return format.replace("%n", format_number(number, precision, delimiter, separator))


def number_with_delimiter(value: Any, delimiter: str = ",", separator: str = ".") -> str:
    """Insert thousands delimiters, keeping the number's own decimals."""
    number = _to_number(value)
    precision = 0
    if number != int(number):
        precision = len(repr(number).partition(".")[2])
    return format_number(number, precision, delimiter, separator)


def number_with_precision(value: Any, precision: int = 3, separator: str = ".", delimiter: str = "",
                          strip_insignificant_zeros: bool = False) -> str:
    result = format_number(_to_number(value), precision, delimiter, separator)
    if strip_insignificant_zeros and separator in result:
        result = result.rstrip("0")
        if result.endswith(separator):
            result = result[:-len(separator)]
    return result


def numeric(value: Any) -> float:
    """Leading number of a quantity, e.g. '3 large' -> 3.0 and '1/4 cup' -> 0.25."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)

    text = str(value).strip()
    prefix = ""
    for char in text:
        if not (char.isdigit() or char in "./"):
            break
        prefix += char

    try:
        if "/" in prefix:
            numerator, _, denominator = prefix.partition("/")
            return float(numerator) / float(denominator)
        return float(prefix)
    except (ValueError, ZeroDivisionError) as e:
        raise TemplateRenderError(f"could not extract numeric value from quantity '{text}'") from e


def format_price(value: Any, decimal_places: int = 2) -> str:
    return f"{_to_number(value):.{decimal_places}f}"


def camelize(value: str) -> str:
    """'hello_world' -> 'HelloWorld'"""
    result = []
    capitalize_next = True
    for char in str(value):
        if char in "_- ":
            capitalize_next = True
        elif capitalize_next:
            result.append(char.upper())
            capitalize_next = False
        else:
            result.append(char.lower())
    return "".join(result)


def _separate_words(value: str, joiner: str, separators: str) -> str:
    result = []
    previous_upper = False
    for index, char in enumerate(str(value)):
        if char.isupper():
            if index > 0 and not previous_upper:
                result.append(joiner)
            result.append(char.lower())
            previous_upper = True
        elif char in separators:
            result.append(joiner)
            previous_upper = False
        else:
            result.append(char)
            previous_upper = False
    return "".join(result)


def underscore(value: str) -> str:
    """'HelloWorld' -> 'hello_world'"""
    return _separate_words(value, "_", "- ")


def dasherize(value: str) -> str:
    """'HelloWorld' -> 'hello-world'"""
    return _separate_words(value, "-", "_ ")


def humanize(value: str) -> str:
    """'hello_world' -> 'Hello world'"""
    result = []
    first = True
    for char in str(value):
        if char in "_-":
            result.append(" ")
        elif first:
            result.append(char.upper())
            first = False
        else:
            result.append(char)
    return "".join(result)


def titleize(value: str) -> str:
    """'hello_world' -> 'Hello World'"""
    result = []
    capitalize_next = True
    for char in str(value):
        if char in "_-":
            result.append(" ")
            capitalize_next = True
        elif char == " ":
            result.append(char)
            capitalize_next = True
        elif capitalize_next:
            result.append(char.upper())
            capitalize_next = False
        else:
            result.append(char.lower())
    return "".join(result)


def upcase_first(value: str) -> str:
    value = str(value)
    return value[:1].upper() + value[1:]


NUMBER_HELPERS: Dict[str, Callable] = {
    "number_to_currency": number_to_currency,
    "number_to_human": number_to_human,
    "number_to_human_size": number_to_human_size,
    "number_to_percentage": number_to_percentage,
    "number_with_delimiter": number_with_delimiter,
    "number_with_precision": number_with_precision,
}

STRING_HELPERS: Dict[str, Callable] = {
    "camelize": camelize,
    "underscore": underscore,
    "dasherize": dasherize,
    "humanize": humanize,
    "titleize": titleize,
    "upcase_first": upcase_first,
}

QUANTITY_FILTERS: Dict[str, Callable] = {
    "numeric": numeric,
    "format_price": format_price,
}
