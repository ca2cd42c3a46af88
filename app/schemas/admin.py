"""Admin dashboard schemas."""
from app.schemas.common import CamelModel


class UserCounts(CamelModel):
    clients: int
    partners: int
    total: int


class VerificationCounts(CamelModel):
    pending: int


class InquiryCounts(CamelModel):
    total: int
    recent: int


class RecentActivity(CamelModel):
    new_clients: int
    new_partners: int
    new_inquiries: int


class DashboardKPIs(CamelModel):
    total_users: UserCounts
    verifications: VerificationCounts
    inquiries: InquiryCounts
    recent_activity: RecentActivity


class DashboardData(CamelModel):
    kpis: DashboardKPIs
