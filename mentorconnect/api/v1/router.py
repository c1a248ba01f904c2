from fastapi import APIRouter
from mentorconnect.api.v1.endpoints import auth, users, directory, connections, conversations, health

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(directory.router, prefix="/directory", tags=["Directory"])
api_router.include_router(connections.router, prefix="/connections", tags=["Connections"])
api_router.include_router(conversations.router, prefix="/conversations", tags=["Conversations"])
