"""Rule management API endpoints.

- POST /api/rules - Create a rule for an owner
- GET /api/rules - List an owner's rules
- GET /api/rules/{rule_id} - Get a single rule
- PATCH /api/rules/{rule_id} - Re-enable or disable a rule
- GET /api/rules/{rule_id}/history - When the rule fired
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.price_alerts.application.dto.rule_dto import (
    CreateRuleRequest,
    RuleDTO,
    RuleListDTO,
    TriggerRecordDTO,
    UpdateRuleRequest,
)
from app.price_alerts.application.exceptions import (
    InvalidRuleError,
    RuleNotFoundError,
    StoreError,
)
from app.price_alerts.application.use_cases.manage_rules import (
    GetRuleHistoryUseCase,
    GetRuleUseCase,
    ListRulesUseCase,
    SetRuleEnabledUseCase,
    SubmitRuleUseCase,
)
from app.price_alerts.domain.repositories.rule_repository import RuleRepository
from app.price_alerts.infrastructure.db.session import get_db_session
from app.price_alerts.infrastructure.repositories.sql_rule_repository import SqlRuleRepository

router = APIRouter()


def _create_repository(session: AsyncSession) -> RuleRepository:
    """Factory function for the rule repository bound to a request session."""
    return SqlRuleRepository(session)


def _store_unavailable(e: StoreError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=e.message,
    )


@router.post("/rules", response_model=RuleDTO, status_code=status.HTTP_201_CREATED)
async def create_rule(
    request: CreateRuleRequest,
    session: AsyncSession = Depends(get_db_session),
) -> RuleDTO:
    """Create a new enabled price rule.

    The rule is evaluated from the next alert cycle on and fires once, when
    the asset's price strictly crosses the threshold in its direction.

    Args:
        request: Owner, asset, threshold and direction.
        session: Database session (injected).

    Returns:
        RuleDTO representing the newly created rule.

    Raises:
        HTTPException: 400 if the rule is invalid.
        HTTPException: 503 if the rule store is unavailable.
    """
    repository = _create_repository(session)
    use_case = SubmitRuleUseCase(repository, quote_currency=get_settings().quote_currency)

    try:
        rule = await use_case.execute(request.owner_id, request)
        await repository.commit()
    except InvalidRuleError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        ) from e
    except StoreError as e:
        raise _store_unavailable(e) from e

    return RuleDTO.from_entity(rule)


@router.get("/rules", response_model=RuleListDTO)
async def list_rules(
    owner: Annotated[Optional[str], Query(description="Rule owner key")] = None,
    enabled_only: Annotated[bool, Query(description="Only rules still armed")] = False,
    session: AsyncSession = Depends(get_db_session),
) -> RuleListDTO:
    """List an owner's rules, oldest first.

    Without ``owner`` the configured default owner is used.
    """
    owner_id = (owner or "").strip() or get_settings().default_owner_id
    use_case = ListRulesUseCase(_create_repository(session))

    try:
        rules = await use_case.execute(owner_id, enabled_only=enabled_only)
    except StoreError as e:
        raise _store_unavailable(e) from e

    return RuleListDTO(rules=rules, total=len(rules))


@router.get("/rules/{rule_id}", response_model=RuleDTO)
async def get_rule(
    rule_id: Annotated[int, Path(description="Rule ID")],
    session: AsyncSession = Depends(get_db_session),
) -> RuleDTO:
    """Get a single rule by ID.

    Raises:
        HTTPException: 404 if rule not found.
    """
    use_case = GetRuleUseCase(_create_repository(session))

    try:
        return await use_case.execute(rule_id)
    except RuleNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message,
        ) from e
    except StoreError as e:
        raise _store_unavailable(e) from e


@router.patch("/rules/{rule_id}", response_model=RuleDTO)
async def update_rule(
    request: UpdateRuleRequest,
    rule_id: Annotated[int, Path(description="Rule ID")],
    session: AsyncSession = Depends(get_db_session),
) -> RuleDTO:
    """Re-enable or disable a rule.

    A fired rule stays disabled until it is re-enabled here.

    Raises:
        HTTPException: 404 if rule not found.
        HTTPException: 503 if the rule store is unavailable.
    """
    repository = _create_repository(session)
    use_case = SetRuleEnabledUseCase(repository)

    try:
        result = await use_case.execute(rule_id, request.enabled)
        await repository.commit()
        return result
    except RuleNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message,
        ) from e
    except StoreError as e:
        raise _store_unavailable(e) from e


@router.get("/rules/{rule_id}/history", response_model=list[TriggerRecordDTO])
async def get_rule_history(
    rule_id: Annotated[int, Path(description="Rule ID")],
    session: AsyncSession = Depends(get_db_session),
) -> list[TriggerRecordDTO]:
    """List when a rule fired and at which price, most recent first."""
    use_case = GetRuleHistoryUseCase(_create_repository(session))

    try:
        return await use_case.execute(rule_id)
    except RuleNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message,
        ) from e
    except StoreError as e:
        raise _store_unavailable(e) from e
