"""
Pitchpool HTTP API (FastAPI)

- POST /polls, GET /polls, GET /polls/{poll_id} - Poll registry
- POST /polls/{poll_id}/preview, /stakes - Staking
- POST /matches/{match_id}/conclude - Open voting windows
- POST /polls/{poll_id}/votes, GET /polls/{poll_id}/tally - Oracle votes
- POST /polls/{poll_id}/resolve, /manual-outcome, GET /payouts - Resolution
- POST /scheduler/tick - Time-driven transitions
- GET /health - Health check

Usage:
    uvicorn api.app:app --reload
"""

__version__ = "0.1.0"
