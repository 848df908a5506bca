# FastAPI dependencies shared by the v1 endpoints.
# Author: Shibo Li
# Date: 2025-07-05
# Version: 0.1.0

from fastapi import HTTPException, Request

from shopagent.core.container import AgentServices


def get_services(request: Request) -> AgentServices:
    """Dependency returning the services built at startup."""
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=503, detail="Agent services not initialized. Please check server logs.")
    return services
