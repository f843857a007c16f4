import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from expense_tracker.core.errors import NotFoundError
from expense_tracker.db.models import Expense
from expense_tracker.db.session import get_db
from expense_tracker.models.schemas import (
    ExpenseEnvelope,
    ExpenseIn,
    ExpenseOut,
    MessageResponse,
)
from expense_tracker.routers.deps import get_current_user_id

logger = logging.getLogger(__name__)

router = APIRouter(tags=["expenses"])

# Integer primary key; 32-bit on PostgreSQL
ExpenseId = Annotated[int, Path(ge=1, le=2**31 - 1)]


def get_owned_expense(db: Session, expense_id: int, user_id: int) -> Expense:
    """Fetch an expense by id, scoped to its owner in the query itself."""
    expense = db.query(Expense).filter(
        Expense.id == expense_id,
        Expense.user_id == user_id
    ).first()
    if expense is None:
        raise NotFoundError()
    return expense


@router.post("/add-expense", response_model=ExpenseEnvelope, status_code=status.HTTP_201_CREATED)
def add_expense(
    payload: ExpenseIn,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    new_expense = Expense(
        user_id=user_id,
        title=payload.title,
        amount=payload.amount,
        date=payload.date,
        description=payload.description
    )
    db.add(new_expense)
    db.commit()
    db.refresh(new_expense)

    logger.info("User id=%s added expense id=%s", user_id, new_expense.id)
    return {"success": True, "expense": new_expense}


@router.get("/expenses", response_model=list[ExpenseOut])
def list_expenses(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    return db.query(Expense).filter(
        Expense.user_id == user_id
    ).order_by(Expense.date.desc(), Expense.id.desc()).all()


@router.get("/expenses/{expense_id}", response_model=ExpenseEnvelope)
def get_expense(
    expense_id: ExpenseId,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return {"success": True, "expense": get_owned_expense(db, expense_id, user_id)}


@router.put("/expenses/{expense_id}", response_model=ExpenseEnvelope)
def update_expense(
    expense_id: ExpenseId,
    payload: ExpenseIn,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    # fetch-then-save; concurrent edits of the same row are last-write-wins
    expense = get_owned_expense(db, expense_id, user_id)
    expense.title = payload.title
    expense.amount = payload.amount
    expense.date = payload.date
    expense.description = payload.description
    db.commit()
    db.refresh(expense)

    logger.info("User id=%s updated expense id=%s", user_id, expense.id)
    return {"success": True, "expense": expense}


@router.delete("/expenses/{expense_id}", response_model=MessageResponse)
def delete_expense(
    expense_id: ExpenseId,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    expense = get_owned_expense(db, expense_id, user_id)
    db.delete(expense)
    db.commit()

    logger.info("User id=%s deleted expense id=%s", user_id, expense_id)
    return {"success": True, "message": "Expense deleted successfully"}
