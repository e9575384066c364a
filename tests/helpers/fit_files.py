"""Build small real FIT files with ``fit_tool``."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from fit_tool.base_type import BaseType
from fit_tool.definition_message import DefinitionMessage
from fit_tool.developer_field import DeveloperField
from fit_tool.field_definition import FieldDefinition
from fit_tool.fit_file_builder import FitFileBuilder
from fit_tool.generic_message import GenericMessage
from fit_tool.profile.messages.developer_data_id_message import DeveloperDataIdMessage
from fit_tool.profile.messages.field_description_message import FieldDescriptionMessage
from fit_tool.profile.messages.file_id_message import FileIdMessage
from fit_tool.profile.messages.lap_message import LapMessage
from fit_tool.profile.messages.record_message import RecordMessage
from fit_tool.profile.messages.session_message import SessionMessage
from fit_tool.profile.profile_type import FileType

from .messages import GARMIN, VENDOR_MESG_NUM, ZWIFT

DEVELOPER_FIELD_NAME = "core_temperature"


def _file_id(manufacturer: int, time_created: int) -> FileIdMessage:
    file_id = FileIdMessage()
    file_id.type = FileType.ACTIVITY
    file_id.manufacturer = manufacturer
    file_id.product = 0
    file_id.time_created = time_created * 1000
    file_id.serial_number = 0x12345678
    return file_id


def _developer_messages() -> list:
    data_id = DeveloperDataIdMessage()
    data_id.application_id = b"123456"
    data_id.developer_data_index = 0
    description = FieldDescriptionMessage()
    description.developer_data_index = 0
    description.field_definition_number = 0
    description.fit_base_type_id = BaseType.UINT8
    description.field_name = DEVELOPER_FIELD_NAME
    description.units = "C"
    return [data_id, description]


def _developer_field(value: int) -> DeveloperField:
    field = DeveloperField(
        developer_data_index=0, field_id=0, size=1, base_type=BaseType.UINT8
    )
    field.set_value(0, value)
    return field


def _vendor_message(value: int) -> GenericMessage:
    definition = DefinitionMessage(
        global_id=VENDOR_MESG_NUM,
        field_definitions=[FieldDefinition(field_id=0, size=1, base_type=BaseType.UINT8)],
    )
    message = GenericMessage(definition)
    message.fields[0].set_encoded_value(0, value)
    return message


def build_secondary_file(
    path: Path,
    *,
    start: int,
    altitudes: Sequence[float],
    distances: Sequence[float],
    speed: float = 8.0,
    manufacturer: int = ZWIFT,
) -> Path:
    builder = FitFileBuilder(auto_define=True)
    builder.add(_file_id(manufacturer, start))
    for offset, (altitude, distance) in enumerate(zip(altitudes, distances)):
        record = RecordMessage()
        record.timestamp = (start + offset) * 1000
        record.position_lat = 51.5 + offset * 0.001
        record.position_long = -0.12
        record.altitude = altitude
        record.distance = distance
        record.speed = speed
        builder.add(record)
    session = SessionMessage()
    session.timestamp = (start + len(altitudes) - 1) * 1000
    builder.add(session)
    builder.build().to_file(str(path))
    return path


def build_primary_file(
    path: Path,
    *,
    start: int,
    count: int,
    manufacturer: int = GARMIN,
    developer_data: bool = False,
    vendor_messages: int = 0,
) -> Path:
    """Write a head unit style recording.

    ``developer_data`` declares one developer field and stores it on every
    record, lap and session next to cadence and power. ``vendor_messages``
    adds that many manufacturer-specific messages after the file id.
    """

    builder = FitFileBuilder(auto_define=True)
    builder.add(_file_id(manufacturer, start))
    for index in range(vendor_messages):
        builder.add(_vendor_message(index))
    if developer_data:
        for message in _developer_messages():
            builder.add(message)
    for offset in range(count):
        if developer_data:
            record = RecordMessage(developer_fields=[_developer_field(36 + offset)])
            record.cadence = 80 + offset
            record.power = 200 + offset
        else:
            record = RecordMessage()
        record.timestamp = (start + offset) * 1000
        record.heart_rate = 120 + offset
        builder.add(record)
    end = (start + count - 1) * 1000
    summary_fields = [_developer_field(40)] if developer_data else None
    lap = LapMessage(developer_fields=summary_fields)
    lap.timestamp = end
    lap.start_time = start * 1000
    builder.add(lap)
    session = SessionMessage(
        developer_fields=[_developer_field(40)] if developer_data else None
    )
    session.timestamp = end
    session.start_time = start * 1000
    builder.add(session)
    builder.build().to_file(str(path))
    return path
