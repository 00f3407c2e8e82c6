"""
JSON wire format for annotations.

Records use the camelCase shape the photo-record service stores:

    {"id", "type", "x", "y", "width"?, "height"?, "text"?, "color",
     "strokeWidth", "points"?: [{"x", "y"}], "timestamp"}
"""

import json
from typing import Any, Dict, Iterable, List

from photomark.editor.annotations import (
    ANNOTATION_CLASSES,
    AnnotationBase,
    AnnotationType,
    DeltaAnnotation,
    FreehandAnnotation,
    TextAnnotation,
)


class AnnotationFormatError(ValueError):
    """Raised when a persisted record is not a valid annotation."""


def annotation_to_dict(annotation: AnnotationBase) -> Dict[str, Any]:
    """Convert an annotation to its wire dictionary."""
    data: Dict[str, Any] = {
        "id": annotation.id,
        "type": annotation.annotation_type.value,
        "x": annotation.x,
        "y": annotation.y,
    }

    if isinstance(annotation, DeltaAnnotation):
        data["width"] = annotation.width
        data["height"] = annotation.height
    elif isinstance(annotation, TextAnnotation):
        data["text"] = annotation.text
    elif isinstance(annotation, FreehandAnnotation):
        data["points"] = [{"x": px, "y": py} for px, py in annotation.points]

    data["color"] = annotation.color
    data["strokeWidth"] = annotation.stroke_width
    data["timestamp"] = annotation.timestamp
    return data


def _require(data: Dict[str, Any], key: str) -> Any:
    if not isinstance(data, dict):
        raise AnnotationFormatError(f"Expected an object with '{key}', got {data!r}")
    if key not in data:
        raise AnnotationFormatError(f"Annotation record is missing '{key}'")
    return data[key]


def _number(data: Dict[str, Any], key: str) -> float:
    value = _require(data, key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise AnnotationFormatError(f"Annotation field '{key}' must be a number, got {value!r}")
    return float(value)


def annotation_from_dict(data: Dict[str, Any]) -> AnnotationBase:
    """
    Build an annotation from its wire dictionary.

    Raises:
        AnnotationFormatError: On an unknown type or a missing/invalid field.
    """
    if not isinstance(data, dict):
        raise AnnotationFormatError(f"Annotation record must be an object, got {type(data).__name__}")

    type_tag = _require(data, "type")
    try:
        annotation_type = AnnotationType(type_tag)
    except ValueError:
        raise AnnotationFormatError(f"Unknown annotation type: {type_tag!r}") from None

    stroke_width = _number(data, "strokeWidth")
    common = {
        "id": str(_require(data, "id")),
        "x": _number(data, "x"),
        "y": _number(data, "y"),
        "color": str(_require(data, "color")),
        "stroke_width": int(stroke_width),
        "timestamp": int(_number(data, "timestamp")),
    }

    annotation_class = ANNOTATION_CLASSES[annotation_type]

    if annotation_type == AnnotationType.TEXT:
        return annotation_class(text=str(_require(data, "text")), **common)

    if annotation_type == AnnotationType.FREEHAND:
        raw_points = _require(data, "points")
        if not isinstance(raw_points, list):
            raise AnnotationFormatError("Freehand 'points' must be a list")
        points = [(_number(point, "x"), _number(point, "y")) for point in raw_points]
        return annotation_class(points=points, **common)

    return annotation_class(
        width=_number(data, "width"),
        height=_number(data, "height"),
        **common,
    )


def dumps_annotations(annotations: Iterable[AnnotationBase], indent: int = 2) -> str:
    return json.dumps([annotation_to_dict(a) for a in annotations], indent=indent)


def loads_annotations(text: str) -> List[AnnotationBase]:
    """
    Parse a JSON array of annotation records.

    Raises:
        AnnotationFormatError: If the text is not valid JSON or any record is invalid.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise AnnotationFormatError(f"Invalid annotation JSON: {e}") from e

    if not isinstance(data, list):
        raise AnnotationFormatError("Annotation document must be a JSON array")

    return [annotation_from_dict(record) for record in data]
