import uuid

from fastapi import APIRouter, status

from todo_api.dependencies import AuthServiceDep, CurrentUserIdDep
from todo_api.models import LoginRequest, LoginResponse, UserCreate, UserRead

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/signup", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def signup(user_data: UserCreate, auth: AuthServiceDep):
    """Create a new user account."""
    return auth.signup(user_data)


@router.post("/login", response_model=LoginResponse)
def login(credentials: LoginRequest, auth: AuthServiceDep):
    """Authenticate a user and return a bearer token valid for 24 hours."""
    return auth.login(credentials.email, credentials.password)


@router.get("/", response_model=list[UserRead])
def list_users(auth: AuthServiceDep):
    return auth.list_users()


@router.get("/me", response_model=UserRead)
def read_current_user(user_id: CurrentUserIdDep, auth: AuthServiceDep):
    """Return current authenticated user info."""
    return auth.get_user(user_id)


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: uuid.UUID, auth: AuthServiceDep):
    return auth.get_user(user_id)
