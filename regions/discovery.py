"""
Region descriptor discovery - load *.json plugin descriptors from a directory.

Each file is validated on its own; the first invalid file aborts discovery
with an error naming the file and the offending field path.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Union

from pydantic import ValidationError as PydanticValidationError

from config import get_logger
from exceptions import ParseError, ValidationError
from regions.schemas import RegionPluginDescriptor
from regions.types import DataType

logger = get_logger(__name__).bind(component="discovery")


DESCRIPTOR_FIELDS = ("name", "displayName", "version")
DATA_SOURCE_FIELDS = ("url", "dataType", "contentGoal")
DATA_TYPE_VALUES = {dt.value for dt in DataType}


def _is_filled(value: Any) -> bool:
    return isinstance(value, str) and len(value) > 0


def _fail(file_name: str, field: str, message: str, value: Any = None):
    raise ValidationError(
        f'Region config "{file_name}" {message}',
        field=field,
        value=value,
        file=file_name,
    )


def validate_descriptor(data: Any, file_name: str) -> RegionPluginDescriptor:
    """Validate one parsed descriptor and build the typed record

    Raises:
        ValidationError: naming file and field path
    """
    if not isinstance(data, dict):
        _fail(file_name, "", "must be a JSON object")

    for field in DESCRIPTOR_FIELDS:
        if not _is_filled(data.get(field)):
            _fail(file_name, field, f"missing field {field}")

    if not isinstance(data.get("description"), str):
        _fail(file_name, "description", "missing field description")

    config = data.get("config")
    if not isinstance(config, dict):
        _fail(file_name, "config", "missing field config")

    if not _is_filled(config.get("regionId")):
        _fail(file_name, "config.regionId", "missing field config.regionId")

    sources = config.get("dataSources")
    if not isinstance(sources, list) or not sources:
        _fail(
            file_name,
            "config.dataSources",
            "must have at least one entry in config.dataSources",
        )

    for i, source in enumerate(sources):
        if not isinstance(source, dict):
            _fail(file_name, f"dataSources[{i}]", f"dataSources[{i}] must be an object")
        for field in DATA_SOURCE_FIELDS:
            if not _is_filled(source.get(field)):
                _fail(file_name, f"dataSources[{i}].{field}", f"dataSources[{i}] missing field {field}")
        if source["dataType"] not in DATA_TYPE_VALUES:
            _fail(
                file_name,
                f"dataSources[{i}].dataType",
                f"dataSources[{i}].dataType has unknown value {source['dataType']!r}",
                value=source["dataType"],
            )

    try:
        return RegionPluginDescriptor.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        path = ".".join(str(part) for part in first["loc"])
        raise ValidationError(
            f'Region config "{file_name}" invalid field {path}: {first["msg"]}',
            field=path,
            file=file_name,
        ) from e


def discover_region_configs(regions_dir: Union[str, Path]) -> List[RegionPluginDescriptor]:
    """Discover and validate region descriptor files.

    Args:
        regions_dir: Directory holding *.json descriptors

    Returns:
        Validated descriptors sorted by file name; empty when the
        directory is missing or holds no JSON files

    Raises:
        ParseError: a file is not valid UTF-8 JSON
        ValidationError: a file is missing a required field
    """
    directory = Path(regions_dir)
    if not directory.is_dir():
        logger.debug("region configs directory not found", path=str(directory))
        return []

    files = sorted(p for p in directory.glob("*.json") if p.is_file())
    if not files:
        return []

    descriptors = []
    for path in files:
        try:
            parsed: Dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError(
                f"Invalid JSON in region config file: {path.name}",
                parser_type="json",
                source=path.name,
            ) from e

        descriptors.append(validate_descriptor(parsed, path.name))

    logger.info(
        "discovered region configs",
        count=len(descriptors),
        names=[d.name for d in descriptors],
    )
    return descriptors
