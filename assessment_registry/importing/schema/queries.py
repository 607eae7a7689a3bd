"""Import query root definitions."""

from __future__ import annotations

import graphene

from ..services import (
    get_schema,
    get_template_content,
    get_template_description,
    list_import_history,
)
from ..services.templates import get_template_file_name
from .types import ImportHistoryType, ImportTemplateType, ImportTypeEnum


def _enum_value(value):
    return getattr(value, "value", value)


class ImportQuery(graphene.ObjectType):
    import_template = graphene.Field(
        ImportTemplateType,
        import_type=ImportTypeEnum(required=True),
        assessment_id=graphene.String(required=True),
        assessment_name=graphene.String(),
        component=graphene.String(),
    )
    import_history = graphene.List(
        graphene.NonNull(ImportHistoryType),
        assessment_id=graphene.String(),
        limit=graphene.Int(),
    )

    def resolve_import_template(
        self, info, import_type, assessment_id, assessment_name=None, component=None
    ):
        import_type = _enum_value(import_type)
        schema = get_schema(import_type)
        return {
            "import_type": import_type,
            "file_name": get_template_file_name(import_type, assessment_id),
            "content": get_template_content(
                import_type, assessment_id, assessment_name, component
            ),
            "description": get_template_description(import_type),
            "required_columns": list(schema.required_columns),
            "optional_columns": list(schema.optional_columns),
        }

    def resolve_import_history(self, info, assessment_id=None, limit=None):
        safe_limit = max(1, min(int(limit), 200)) if limit else None
        return list_import_history(assessment_id, limit=safe_limit)
