"""InfluxDB line protocol encoder for batches."""

from influxreporter.core.models import PRECISION_NANOS, Batch, FieldValue, Record


def _escape_measurement(value: str) -> str:
    return value.replace("\\", "\\\\").replace(",", "\\,").replace(" ", "\\ ")


def _escape_key(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace(",", "\\,")
        .replace("=", "\\=")
        .replace(" ", "\\ ")
    )


def _format_field_value(value: FieldValue) -> str:
    if isinstance(value, int):
        return f"{value}i"
    return repr(float(value))


def encode_record(record: Record, precision: str = "ns") -> str:
    """Encode a single record as one line (without trailing newline).

    Args:
        record: The record to encode.
        precision: Unit the timestamp is expressed in.

    Returns:
        ``measurement[,tag=value...] field=value[,...] timestamp``
    """
    head = _escape_measurement(record.name)
    for key in sorted(record.tags):
        value = record.tags[key]
        # Empty tag values are not representable; the store drops them too.
        if value == "":
            continue
        head += f",{_escape_key(key)}={_escape_key(value)}"
    fields = ",".join(
        f"{_escape_key(key)}={_format_field_value(record.fields[key])}"
        for key in sorted(record.fields)
    )
    timestamp = record.timestamp // PRECISION_NANOS[precision]
    return f"{head} {fields} {timestamp}"


def encode_batch(batch: Batch) -> str:
    """Encode a batch to newline-delimited line protocol.

    Args:
        batch: The batch to encode.

    Returns:
        One line per record, each ending in a newline.
        Empty string if the batch has no records.
    """
    lines = [encode_record(record, batch.precision) for record in batch.records]

    if not lines:
        return ""

    return "\n".join(lines) + "\n"
