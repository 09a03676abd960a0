"""Built-in seed catalog used when neither the remote nor the local cache has data."""

from typing import List

from catalog.models import ComparableField, ComparableItem, ComparisonRule, FieldType

__all__ = ["default_fields", "default_items"]


def default_fields() -> List[ComparableField]:
    """Return a fresh copy of the seed fields."""
    return [
        ComparableField(
            id="screen_size",
            label="Screen size",
            type=FieldType.DIMENSION,
            unit="in",
            order=1,
            comparison_rule=ComparisonRule.HIGHER_IS_BETTER,
        ),
        ComparableField(
            id="resolution",
            label="Resolution",
            type=FieldType.SELECT,
            options=["HD", "FHD", "4K", "8K"],
            order=2,
            is_highlightable=True,
            highlight_color="#3b82f6",
        ),
        ComparableField(
            id="panel_type",
            label="Panel type",
            type=FieldType.SELECT,
            options=["LED", "QLED", "OLED", "Mini-LED"],
            order=3,
            is_highlightable=True,
            highlight_color="#8b5cf6",
        ),
        ComparableField(
            id="refresh_rate",
            label="Refresh rate",
            type=FieldType.NUMBER,
            unit="Hz",
            order=4,
            is_highlightable=True,
            highlight_color="#22c55e",
            highlight_icon="zap",
            comparison_rule=ComparisonRule.HIGHER_IS_BETTER,
        ),
        ComparableField(
            id="hdr_support",
            label="HDR support",
            type=FieldType.BOOLEAN,
            order=5,
            comparison_rule=ComparisonRule.EQUAL,
        ),
        ComparableField(
            id="smart_os",
            label="Operating system",
            type=FieldType.TEXT,
            order=6,
        ),
        ComparableField(
            id="hdmi_ports",
            label="HDMI 2.1 ports",
            type=FieldType.NUMBER,
            order=7,
            is_highlightable=True,
            comparison_rule=ComparisonRule.HIGHER_IS_BETTER,
        ),
    ]


def default_items() -> List[ComparableItem]:
    """Return a fresh copy of the seed TV models."""
    return [
        ComparableItem(
            id="lg-c3",
            brand="LG",
            name="LG OLED C3",
            slug="lg-oled-c3",
            images=["https://picsum.photos/400/300?random=1"],
            specs={
                "screen_size": 55,
                "resolution": "4K",
                "panel_type": "OLED",
                "refresh_rate": 120,
                "hdr_support": True,
                "smart_os": "WebOS 23",
                "hdmi_ports": 4,
            },
        ),
        ComparableItem(
            id="samsung-s95c",
            brand="Samsung",
            name="Samsung S95C OLED",
            slug="samsung-s95c",
            images=["https://picsum.photos/400/300?random=2"],
            specs={
                "screen_size": 65,
                "resolution": "4K",
                "panel_type": "OLED",
                "refresh_rate": 144,
                "hdr_support": True,
                "smart_os": "Tizen",
                "hdmi_ports": 4,
            },
        ),
        ComparableItem(
            id="sony-a80l",
            brand="Sony",
            name="Sony Bravia XR A80L",
            slug="sony-a80l",
            images=["https://picsum.photos/400/300?random=3"],
            specs={
                "screen_size": 55,
                "resolution": "4K",
                "panel_type": "OLED",
                "refresh_rate": 120,
                "hdr_support": True,
                "smart_os": "Google TV",
                "hdmi_ports": 2,
            },
        ),
        ComparableItem(
            id="tcl-c845",
            brand="TCL",
            name="TCL C845 Mini-LED",
            slug="tcl-c845",
            images=["https://picsum.photos/400/300?random=4"],
            specs={
                "screen_size": 65,
                "resolution": "4K",
                "panel_type": "Mini-LED",
                "refresh_rate": 144,
                "hdr_support": True,
                "smart_os": "Google TV",
                "hdmi_ports": 2,
            },
        ),
    ]
