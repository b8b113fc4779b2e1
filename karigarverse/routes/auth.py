from fastapi import APIRouter, Depends, status
from sqlmodel import Session, select
from karigarverse.database import get_session
from karigarverse.errors import AuthenticationError, ConflictError
from karigarverse.models.user import User
from karigarverse.schemas.user_schemas import UserSignup, UserLogin, Token
from karigarverse.services.user_service import profile_response
from karigarverse.utils.hash import hash_password, verify_password
from karigarverse.utils.token import create_access_token, get_current_user


router = APIRouter()


@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(payload: UserSignup, session: Session = Depends(get_session)):
    email = payload.email.lower()
    existing_user = session.exec(select(User).where(User.email == email)).first()
    if existing_user:
        raise ConflictError("User with this email already exists")

    user = User(
        email=email,
        password_hash=hash_password(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone=payload.phone,
    )

    session.add(user)
    session.commit()
    session.refresh(user)

    token = create_access_token({"user_id": user.id})
    return {
        "user": profile_response(user),
        "token": token,
        "message": "Account created successfully",
    }


@router.post("/login", response_model=Token)
def login(payload: UserLogin, session: Session = Depends(get_session)):
    user = session.exec(select(User).where(User.email == payload.email.lower())).first()

    if not user or not verify_password(payload.password, user.password_hash):
        raise AuthenticationError("Invalid email or password")

    token = create_access_token({"user_id": user.id})
    return Token(access_token=token, token_type="bearer")


@router.get("/user")
def get_user(current_user: User = Depends(get_current_user)):
    return {"data": profile_response(current_user)}
