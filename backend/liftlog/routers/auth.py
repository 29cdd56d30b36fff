from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from liftlog.db import get_db
from liftlog.models import User
from liftlog.schemas.user import PreferencesUpdate, TokenRead, UserLogin, UserRead, UserRegister
from liftlog.security import issue_access_token, token_lifetime_seconds
from liftlog.deps.auth import get_current_user
from liftlog.services.account_service import AccountService

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def register(payload: UserRegister, db: Session = Depends(get_db)):
    return AccountService(db).register(payload)

@router.post("/login", response_model=TokenRead)
def login(payload: UserLogin, db: Session = Depends(get_db)):
    user = AccountService(db).authenticate(payload.email, payload.password)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid credentials")
    # the unit travels with the token so a client can set up its session screen
    return TokenRead(
        access_token=issue_access_token(user.id),
        expires_in=token_lifetime_seconds(),
        weight_unit=user.weight_unit,
    )

@router.get("/me", response_model=UserRead)
def me(current_user: User = Depends(get_current_user)):
    return current_user

@router.patch("/me/preferences", response_model=UserRead)
def update_preferences(
    payload: PreferencesUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return AccountService(db).update_preferences(current_user.id, payload)
