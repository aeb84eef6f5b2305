"""Helpers to build SBS lines for tests."""


def sbs_line(msg_type, hex_id="ABCDEF", **fields):
    """Build a 22-field MSG line; keyword ``f<N>`` sets 1-based field N."""

    parts = [
        "MSG",
        str(msg_type),
        "1",
        "1",
        hex_id,
        "1",
        "2024/05/03",
        "19:40:00.000",
        "2024/05/03",
        "19:40:00.000",
    ] + [""] * 12
    for key, value in fields.items():
        parts[int(key[1:]) - 1] = str(value)
    return ",".join(parts)


def identification(hex_id="ABCDEF", callsign="TEST123"):
    return sbs_line(1, hex_id, f11=callsign)


def position(hex_id="ABCDEF", altitude=5000, lat=51.5, lon=-0.1):
    fields = {}
    if altitude is not None:
        fields["f12"] = altitude
    if lat is not None:
        fields["f15"] = lat
    if lon is not None:
        fields["f16"] = lon
    return sbs_line(3, hex_id, **fields)


def velocity(hex_id="ABCDEF", ground_speed=400, track=90):
    return sbs_line(4, hex_id, f13=ground_speed, f14=track)


def altitude(hex_id="ABCDEF", feet=12000):
    return sbs_line(5, hex_id, f12=feet)
