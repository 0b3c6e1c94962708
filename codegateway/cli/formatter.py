from rich.table import Table

SEVERITY_STYLES = {
    "critical": "red",
    "warning": "yellow",
    "info": "blue",
}


def format_table(data, columns, title=None):
    """Formats data into a rich table."""
    table = Table(title=title)
    for col in columns:
        table.add_column(col)
    for row in data:
        table.add_row(*[str(item) for item in row])
    return table


def colorize_severity(severity):
    value = getattr(severity, "value", severity)
    style = SEVERITY_STYLES.get(value, "white")
    return f"[{style}]{value.upper()}[/{style}]"
