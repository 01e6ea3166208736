from typing import List, Literal, Optional, Tuple

LOW_STOCK_THRESHOLD = 10


def generate_markdown_table(
    headers: Optional[List[str]],
    rows: List[List[str]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Generate a Markdown table.

    Args:
        headers: List of column headers, or None to use first row as headers.
        rows: List of rows, each a list of values (stringified).
        aligns: 'l', 'c' or 'r' per column, all centered when omitted.

    Returns:
        str: Markdown formatted table, "" when there are no rows.
    """
    if not rows:
        return ""

    if not headers:
        headers, rows = rows[0], rows[1:]

    headers = [str(h) for h in headers]
    aligns = aligns or ["c"] * len(headers)
    if len(aligns) != len(headers):
        raise ValueError("Length of aligns must match number of headers.")

    align_map = {"l": ":---", "c": ":---:", "r": "---:"}
    lines = [
        "| " + " | ".join(headers) + " |",
        "| " + " | ".join(align_map[a] for a in aligns) + " |",
    ]
    lines += ["| " + " | ".join(str(v) for v in row) + " |" for row in rows]
    return "\n".join(lines)


def format_price(price: float) -> str:
    """Rupiah, no decimals, dot as thousands separator: 12500 -> 'Rp 12.500'"""
    sign = "-" if price < 0 else ""
    return f"{sign}Rp {round(abs(price)):,}".replace(",", ".")


def format_number_input(value: float) -> str:
    """Render a stored number the way it would have been typed: 10.0 -> '10'"""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def stock_status(
    quantity: int,
) -> Tuple[str, Literal["error", "warning", "success"]]:
    """label and tone for a stock level"""
    if quantity == 0:
        return "Out of Stock", "error"
    if quantity < LOW_STOCK_THRESHOLD:
        return "Low Stock", "warning"
    return "In Stock", "success"
