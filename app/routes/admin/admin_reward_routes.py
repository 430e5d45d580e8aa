from fastapi import APIRouter, Depends
from supabase import AsyncClient
from app.utils.supabase_client_handlers import get_supabase_client
from app.utils.user_auth import get_current_admin_id
from app.services.admin.admin_reward_services import AdminRewardService
from app.models.reward_models import RewardListResponse, RewardResponse

admin_reward_router = APIRouter(prefix="/admin/rewards", tags=["Admin"], dependencies=[Depends(get_current_admin_id)])


async def get_admin_reward_service(supabase_client: AsyncClient = Depends(get_supabase_client)) -> AdminRewardService:
    """Dependency to get AdminRewardService instance"""
    return AdminRewardService(supabase_client)


@admin_reward_router.get("", response_model=RewardListResponse)
async def list_rewards(reward_service: AdminRewardService = Depends(get_admin_reward_service)):
    """All promotional rewards"""
    return await reward_service.list_rewards()


# --------------------------------------------------------------


@admin_reward_router.put("/{reward_id}/toggle-active", response_model=RewardResponse)
async def toggle_reward_active(reward_id: str, reward_service: AdminRewardService = Depends(get_admin_reward_service)):
    """Activate or deactivate a reward"""
    return await reward_service.toggle_reward_active(reward_id)


# --------------------------------------------------------------


@admin_reward_router.delete("/{reward_id}", response_model=bool)
async def delete_reward(reward_id: str, reward_service: AdminRewardService = Depends(get_admin_reward_service)):
    """Remove a reward"""
    return await reward_service.delete_reward(reward_id)
