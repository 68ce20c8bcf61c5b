"""
GraphQL schema: queries and mutations for accounts, diet plans and meals.

Resolvers stay thin; they unpack inputs, check authentication through the
context and delegate to the service layer.
"""

import logging
from typing import List, Optional

import strawberry
from graphql import GraphQLError
from pydantic import BaseModel, ValidationError
from strawberry.fastapi import GraphQLRouter
from strawberry.types import Info

from api.graphql.context import GraphQLContext, get_context
from api.graphql.types import (
    AuthPayload,
    DayOfWeek,
    DietPlanGenerationResult,
    DietPlanInput,
    DietPlanNode,
    FeedbackInput,
    MealNode,
    MealUpdateInput,
    SaveDietPlanInput,
    UserNode,
    UserRegistrationInput,
    UserUpdateInput,
    provided_fields,
)
from app.exceptions import DietPlannerError, ServiceValidationError
from domain.schemas import (
    DietPlanRequest,
    FeedbackCreate,
    MealUpdate,
    ProfileUpdate,
    RegistrationData,
    SavePlanRequest,
)
from services.auth_service import AuthService
from services.diet_plan_service import MEAL_ACCESS_DENIED, DietPlanService, GenerationResult, parse_uuid
from services.feedback_service import FeedbackService
from services.profile_service import ProfileService

logger = logging.getLogger("dietplanner.api.graphql")

ContextInfo = Info[GraphQLContext, None]


def validated(schema: type, data: dict) -> BaseModel:
    """Build a service schema from resolver input, reporting problems as bad input"""
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        errors = e.errors(include_url=False, include_context=False)
        first = errors[0]
        field = ".".join(str(part) for part in first["loc"])
        raise ServiceValidationError(f"Invalid {field}: {first['msg']}", details={"errors": errors})


def _generation_result(result: GenerationResult) -> DietPlanGenerationResult:
    return DietPlanGenerationResult(
        success=result.success,
        diet_plan=DietPlanNode.from_model(result.diet_plan) if result.diet_plan else None,
        error=result.error,
    )


def _auth_payload(token_and_user) -> AuthPayload:
    token, user = token_and_user
    return AuthPayload(token=token, user=UserNode.from_model(user))


# ============================================================================
# Queries
# ============================================================================


@strawberry.type
class Query:
    @strawberry.field
    def me(self, info: ContextInfo) -> Optional[UserNode]:
        user = info.context.require_user()
        return UserNode.from_model(user)

    @strawberry.field
    def get_diet_plan(self, info: ContextInfo, id: strawberry.ID) -> Optional[DietPlanNode]:
        user = info.context.require_user()
        return DietPlanNode.from_model(DietPlanService.get_owned_plan(info.context.db, user.id, id))

    @strawberry.field
    def get_active_diet_plan(self, info: ContextInfo) -> Optional[DietPlanNode]:
        user = info.context.require_user()
        plan = DietPlanService.get_active_plan(info.context.db, user.id)
        return DietPlanNode.from_model(plan) if plan else None

    @strawberry.field
    def get_all_diet_plans(self, info: ContextInfo) -> List[DietPlanNode]:
        user = info.context.require_user()
        return [DietPlanNode.from_model(plan) for plan in DietPlanService.list_plans(info.context.db, user.id)]

    @strawberry.field
    def get_meals_by_day(self, info: ContextInfo, diet_plan_id: strawberry.ID, day: DayOfWeek) -> List[MealNode]:
        user = info.context.require_user()
        meals = DietPlanService.get_meals_by_day(info.context.db, user.id, diet_plan_id, day)
        return [MealNode.from_model(meal) for meal in meals]


# ============================================================================
# Mutations
# ============================================================================


@strawberry.type
class Mutation:
    # ------------------------------------------------------------ accounts

    @strawberry.mutation
    def register(self, info: ContextInfo, input: UserRegistrationInput) -> AuthPayload:
        data = validated(RegistrationData, provided_fields(input, drop_none=True))
        return _auth_payload(AuthService.register(info.context.db, data))

    @strawberry.mutation
    def login(self, info: ContextInfo, email: str, password: str) -> AuthPayload:
        return _auth_payload(AuthService.login(info.context.db, email, password))

    @strawberry.mutation
    def verify_email(self, info: ContextInfo, token: str) -> AuthPayload:
        return _auth_payload(AuthService.verify_email(info.context.db, token))

    @strawberry.mutation
    def resend_verification(self, info: ContextInfo, email: str) -> bool:
        return AuthService.resend_verification(info.context.db, email)

    @strawberry.mutation
    def forgot_password(self, info: ContextInfo, email: str) -> bool:
        return AuthService.forgot_password(info.context.db, email)

    @strawberry.mutation
    def reset_password(self, info: ContextInfo, token: str, new_password: str) -> bool:
        return AuthService.reset_password(info.context.db, token, new_password)

    @strawberry.mutation
    def update_profile(self, info: ContextInfo, input: UserUpdateInput) -> UserNode:
        user = info.context.require_user()
        data = validated(ProfileUpdate, provided_fields(input))
        return UserNode.from_model(ProfileService.update_profile(info.context.db, user.id, data))

    # ------------------------------------------------------------ plans

    @strawberry.mutation
    async def generate_diet_plan(self, info: ContextInfo, input: DietPlanInput) -> DietPlanGenerationResult:
        user = info.context.require_user()
        request = validated(DietPlanRequest, provided_fields(input, drop_none=True))
        result = await DietPlanService.generate_plan(info.context.db, user.id, request)
        return _generation_result(result)

    @strawberry.mutation
    def save_diet_plan(self, info: ContextInfo, input: SaveDietPlanInput) -> DietPlanGenerationResult:
        user = info.context.require_user()
        request = validated(SavePlanRequest, provided_fields(input, drop_none=True))
        return _generation_result(DietPlanService.save_plan(info.context.db, user.id, request))

    @strawberry.mutation
    def update_diet_plan(self, info: ContextInfo, id: strawberry.ID, input: DietPlanInput) -> DietPlanNode:
        user = info.context.require_user()
        request = validated(DietPlanRequest, provided_fields(input, drop_none=True))
        return DietPlanNode.from_model(DietPlanService.update_plan(info.context.db, user.id, id, request))

    @strawberry.mutation
    def delete_diet_plan(self, info: ContextInfo, id: strawberry.ID) -> bool:
        user = info.context.require_user()
        return DietPlanService.delete_plan(info.context.db, user.id, id)

    @strawberry.mutation
    def set_active_diet_plan(self, info: ContextInfo, id: strawberry.ID) -> DietPlanNode:
        user = info.context.require_user()
        return DietPlanNode.from_model(DietPlanService.set_active_plan(info.context.db, user.id, id))

    # ------------------------------------------------------------ meals

    @strawberry.mutation
    def update_meal(self, info: ContextInfo, input: MealUpdateInput) -> MealNode:
        user = info.context.require_user()
        fields = provided_fields(input)
        fields["id"] = parse_uuid(fields["id"], MEAL_ACCESS_DENIED)
        update = validated(MealUpdate, fields)
        return MealNode.from_model(DietPlanService.update_meal(info.context.db, user.id, update))

    @strawberry.mutation
    async def regenerate_meal(
        self, info: ContextInfo, meal_id: strawberry.ID, custom_requirements: Optional[str] = None
    ) -> MealNode:
        user = info.context.require_user()
        meal = await DietPlanService.regenerate_meal(info.context.db, user.id, meal_id, custom_requirements)
        return MealNode.from_model(meal)

    # ------------------------------------------------------------ exports

    @strawberry.mutation(name="generatePDF", description="Base64 encoded PDF of a diet plan")
    def generate_pdf(self, info: ContextInfo, diet_plan_id: strawberry.ID) -> str:
        user = info.context.require_user()
        return DietPlanService.export_pdf(info.context.db, user.id, diet_plan_id)

    @strawberry.mutation(name="generateCSV")
    def generate_csv(self, info: ContextInfo, diet_plan_id: strawberry.ID) -> str:
        user = info.context.require_user()
        return DietPlanService.export_csv(info.context.db, user.id, diet_plan_id)

    # ------------------------------------------------------------ contact

    @strawberry.mutation
    def submit_feedback(self, info: ContextInfo, input: FeedbackInput) -> bool:
        user = info.context.user
        data = validated(FeedbackCreate, provided_fields(input))
        return FeedbackService.submit(info.context.db, user.id if user else None, data)


# ============================================================================
# Schema
# ============================================================================


class DietPlannerSchema(strawberry.Schema):
    """Schema that tags application errors with their code and logs the rest"""

    def process_errors(self, errors: List[GraphQLError], execution_context=None) -> None:
        for error in errors:
            original = error.original_error
            if isinstance(original, DietPlannerError):
                error.extensions = {**(error.extensions or {}), "code": original.code}
                logger.info(f"graphql_error code={original.code} path={error.path} message={original.message}")
            elif original is None:
                logger.warning(f"graphql_request_error message={error.message}")
            else:
                error.extensions = {**(error.extensions or {}), "code": "INTERNAL_SERVER_ERROR"}
                logger.error(f"graphql_unexpected_error path={error.path}", exc_info=original)


schema = DietPlannerSchema(query=Query, mutation=Mutation)

graphql_router = GraphQLRouter(schema, context_getter=get_context)
