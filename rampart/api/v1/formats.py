"""Lists the filename conventions the upload endpoint understands."""

from fastapi import APIRouter

from rampart.schemas.ingestion_log import FormatsResponse, NamingRuleOut
from rampart.services.format_router import list_naming_rules

router = APIRouter()


@router.get("", response_model=FormatsResponse, response_model_by_alias=True)
def get_formats() -> FormatsResponse:
    """Naming rules in match order, each with the profile it routes to."""
    return FormatsResponse(rules=[NamingRuleOut.model_validate(r) for r in list_naming_rules()])
