"""Display-name translation and icon selection for openSenseMap sensors."""

from __future__ import annotations

from typing import Dict, Mapping

from app.schemas import SensorIcon

SENSOR_NAME_TRANSLATIONS: Mapping[str, str] = {
    "Temperatur": "Temperature",
    "rel. Luftfeuchte": "Relative Humidity",
    "Luftdruck": "Air Pressure",
    "Luftfeuchtigkeit": "Humidity",
    "Helligkeit": "Brightness",
    "Beleuchtungsstärke": "Illuminance",
    "UV-Intensität": "UV Intensity",
}

SENSOR_TYPE_ICONS: Dict[str, SensorIcon] = {
    "temperature": SensorIcon.thermometer,
    "humidity": SensorIcon.humidity,
    "pressure": SensorIcon.cloud,
}


class SensorLabeler:
    """Pure lookup component that can be unit tested in isolation."""

    def translate_name(self, name: str) -> str:
        """Return the English label for a known German name, else ``name``."""
        return SENSOR_NAME_TRANSLATIONS.get(name, name)

    def icon_for(self, sensor_type: str) -> SensorIcon:
        # Matches on the raw sensorType, never on the translated label.
        return SENSOR_TYPE_ICONS.get(sensor_type.lower(), SensorIcon.chart)
