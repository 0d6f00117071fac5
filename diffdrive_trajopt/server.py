"""
FastAPI server for the differential-drive trajectory generator.

Endpoints:
- GET /health: Liveness check
- POST /solve: Profile waypoints into a timed trajectory
- POST /optimize: Tune waypoints for minimum time, then profile them
"""

import logging

from fastapi import FastAPI

from .config import get_log_level, get_server_address
from .routes import solve_router


# Create FastAPI app
app = FastAPI(
    title="Differential Drive Trajectory Optimizer",
    description="Hermite spline trajectories for differential-drive robots",
    version="1.0.0"
)

app.include_router(solve_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


def main():
    """Run the server."""
    import uvicorn

    logging.basicConfig(
        level=get_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host, port = get_server_address()
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
