# ------------------------------------------------------------
# app.py - FastAPI backend for the housekeeping roster
# ------------------------------------------------------------
import logging
from contextlib import asynccontextmanager
from typing import Optional, Union

from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

import config
import roster
from auth import Requester, require_roles
from database import get_db, init_db
from errors import HousekeepingError
from logging_config import setup_logging
from models import RoleEnum

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(config.LOG_LEVEL, config.LOG_FILE)
    init_db()
    logger.info("Housekeeping API started (env=%s)", config.ENV)
    yield


app = FastAPI(title="Housekeeping Management System API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins (adjust for production)
    allow_methods=["*"],
    allow_headers=["*"],
)

ADMIN = (RoleEnum.admin,)
STAFF_ROLES = (RoleEnum.admin, RoleEnum.receptionist, RoleEnum.housekeeping)
FRONT_DESK = (RoleEnum.admin, RoleEnum.receptionist)


# ----- Pydantic payloads -----
class GenerateIn(BaseModel):
    hotelId: Optional[Union[int, str]] = None
    date: Optional[str] = None

class CheckoutIn(BaseModel):
    hotelId: Optional[Union[int, str]] = None
    roomId: Optional[Union[int, str]] = None

class StatusUpdate(BaseModel):
    status: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=2000)

class AssignIn(BaseModel):
    staffId: Optional[Union[int, str]] = None


# ----- Errors -----
@app.exception_handler(HousekeepingError)
async def housekeeping_error(request: Request, exc: HousekeepingError):
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": exc.message})


# ----- Routes -----
@app.get("/")
def root():
    return {"message": "Housekeeping Management System API is running"}

@app.post("/housekeeping/generate", status_code=201)
def generate(payload: GenerateIn, db: Session = Depends(get_db),
             requester: Requester = Depends(require_roles(*ADMIN))):
    return roster.generate_daily_tasks(db, payload.hotelId, payload.date, requester)

@app.post("/housekeeping/checkout-cleaning", status_code=201)
def checkout_cleaning(payload: CheckoutIn, db: Session = Depends(get_db),
                      requester: Requester = Depends(require_roles(*FRONT_DESK))):
    task = roster.create_checkout_cleaning_task(db, payload.hotelId, payload.roomId)
    return {"message": "Checkout cleaning task created", "data": task}

@app.get("/housekeeping/tasks")
def tasks_by_date(hotelId: Optional[str] = None, date: Optional[str] = None,
                  shift: Optional[str] = None, status: Optional[str] = None,
                  assignedTo: Optional[str] = None, db: Session = Depends(get_db),
                  requester: Requester = Depends(require_roles(*STAFF_ROLES))):
    filters = {"shift": shift, "status": status, "assignedTo": assignedTo}
    tasks = roster.get_tasks_by_date(db, hotelId, date, filters, requester)
    return {"count": len(tasks), "data": tasks}

@app.get("/housekeeping/my-tasks")
def my_tasks(date: Optional[str] = None, shift: Optional[str] = None,
             status: Optional[str] = None, db: Session = Depends(get_db),
             requester: Requester = Depends(require_roles(RoleEnum.housekeeping))):
    tasks = roster.get_my_tasks(db, requester, {"date": date, "shift": shift, "status": status})
    return {"count": len(tasks), "data": tasks}

@app.patch("/housekeeping/tasks/{task_id}/status")
def update_status(task_id: str, payload: StatusUpdate, db: Session = Depends(get_db),
                  requester: Requester = Depends(require_roles(*STAFF_ROLES))):
    task = roster.update_task_status(db, task_id, payload.status, payload.notes, requester)
    return {"message": "Task status updated successfully", "data": task}

@app.patch("/housekeeping/tasks/{task_id}/assign")
def assign(task_id: str, payload: AssignIn, db: Session = Depends(get_db),
           requester: Requester = Depends(require_roles(*ADMIN))):
    task = roster.assign_task(db, task_id, payload.staffId, requester)
    return {"message": "Task assigned successfully", "data": task}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.HOST, port=config.PORT)
