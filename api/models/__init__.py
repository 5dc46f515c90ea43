"""API request and response models."""

from api.models.requests import (
    ConcludeMatchRequest,
    CreatePollRequest,
    FundRequest,
    ManualOutcomeRequest,
    PreviewRequest,
    SchedulerTickRequest,
    StakeRequest,
    VoteRequest,
)
from api.models.responses import (
    ConcludeMatchResponse,
    ErrorDetail,
    ErrorResponse,
    FundResponse,
    HealthResponse,
    OutcomeResponse,
    PayoutsResponse,
    PollListResponse,
    PollResponse,
    PreviewResponse,
    ResolutionResponse,
    SchedulerTickResponse,
    StakeListResponse,
    StakeResponse,
    TallyResponse,
    VoterPollsResponse,
    VoterStatsResponse,
    VoteResponse,
)

__all__ = [
    "ConcludeMatchRequest",
    "CreatePollRequest",
    "FundRequest",
    "ManualOutcomeRequest",
    "PreviewRequest",
    "SchedulerTickRequest",
    "StakeRequest",
    "VoteRequest",
    "ConcludeMatchResponse",
    "ErrorDetail",
    "ErrorResponse",
    "FundResponse",
    "HealthResponse",
    "OutcomeResponse",
    "PayoutsResponse",
    "PollListResponse",
    "PollResponse",
    "PreviewResponse",
    "ResolutionResponse",
    "SchedulerTickResponse",
    "StakeListResponse",
    "StakeResponse",
    "TallyResponse",
    "VoterPollsResponse",
    "VoterStatsResponse",
    "VoteResponse",
]
