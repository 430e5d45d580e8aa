from supabase import AsyncClient
from app.configs.app_settings import settings
from app.models.reward_models import DiscountType, RewardListResponse, RewardResponse
from app.services.booking_aggregator import coerce_number, parse_timestamp
from app.services.booking_feed_services import get_dashboard_timezone
from app.custom_error import RewardNotFoundError, ServerError
from typing import Any, Dict
import logging

logger = logging.getLogger(__name__)

DEFAULT_REWARD_CURRENCY = "₹"


def _format_value(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def discount_label(reward: Dict[str, Any]) -> str:
    """Human readable discount, e.g. "15% off" or "₹50 off" """
    discount_type = reward.get("discountType")
    value = reward.get("discountValue")
    shown = "—" if value is None else _format_value(value)

    if discount_type == DiscountType.PERCENTAGE.value:
        return f"{shown}% off"
    if discount_type == DiscountType.FIXED.value:
        return f"{reward.get('currency') or DEFAULT_REWARD_CURRENCY}{shown} off"
    if value is not None:
        return shown
    return "—"


class AdminRewardService:
    def __init__(self, supabase_client: AsyncClient):
        self.supabase_client = supabase_client

    def _to_reward(self, row: Dict[str, Any]) -> RewardResponse:
        image_url = row.get("imageUrl") or row.get("imageURL") or row.get("brandImage") or row.get("image") or None
        discount_value = row.get("discountValue")

        return RewardResponse(
            id=str(row.get("id", "")),
            reward_id=row.get("rewardId"),
            title=str(row.get("title") or ""),
            subtitle=str(row.get("subtitle") or ""),
            description=str(row.get("description") or ""),
            image_url=image_url,
            discount_type=row.get("discountType"),
            discount_value=None if discount_value is None else coerce_number(discount_value),
            discount_label=discount_label(row),
            button_text=row.get("buttonText"),
            is_active=bool(row.get("isActive")),
            created_at=parse_timestamp(row.get("createdAt"), get_dashboard_timezone()),
        )

    # =====================================
    # REWARD OPERATIONS
    # =====================================

    async def list_rewards(self) -> RewardListResponse:
        """All rewards, newest first"""
        try:
            result = await self.supabase_client.table(settings.REWARDS_TABLE).select("*").order("createdAt", desc=True).execute()
            rewards = [self._to_reward(row) for row in result.data or []]

            return RewardListResponse(rewards=rewards, total=len(rewards), active=sum(1 for r in rewards if r.is_active))

        except Exception as e:
            logger.error(f"Error fetching rewards: {str(e)}")
            raise ServerError(f"Failed to fetch rewards: {str(e)}")

    # --------------------------------------------------------------

    async def toggle_reward_active(self, reward_id: str) -> RewardResponse:
        """Switch a reward between active and inactive"""
        try:
            result = await self.supabase_client.table(settings.REWARDS_TABLE).select("*").eq("id", reward_id).execute()

            if not result.data:
                raise RewardNotFoundError()

            is_active = not bool(result.data[0].get("isActive"))
            update_result = (
                await self.supabase_client.table(settings.REWARDS_TABLE).update({"isActive": is_active}).eq("id", reward_id).execute()
            )

            if not update_result.data:
                raise RewardNotFoundError()

            logger.info(f"✅ Reward {reward_id} is_active={is_active}")
            return self._to_reward(update_result.data[0])

        except Exception as e:
            logger.error(f"Error toggling reward: {str(e)}")
            if isinstance(e, RewardNotFoundError):
                raise e
            raise ServerError(f"Failed to update reward: {str(e)}")

    # --------------------------------------------------------------

    async def delete_reward(self, reward_id: str) -> bool:
        """Remove a reward"""
        try:
            result = await self.supabase_client.table(settings.REWARDS_TABLE).delete().eq("id", reward_id).execute()

            if not result.data:
                raise RewardNotFoundError()

            logger.info(f"🗑️ Reward {reward_id} deleted")
            return True

        except Exception as e:
            logger.error(f"Error deleting reward: {str(e)}")
            if isinstance(e, RewardNotFoundError):
                raise e
            raise ServerError(f"Failed to delete reward: {str(e)}")
