import asyncio
import contextlib
import logging
import os
from typing import List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database
from pymongo.errors import PyMongoError

import chat
import config
import database
import recipes
from errors import InvalidLimit, NotFound, ParticipantExists, ParticipantMissing, Unauthorized
from presence import run_sweeper
from schemas import JoinRequest, MessageRequest, RecipeRequest, RecipeTitleRequest

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    sweeper = None
    if app.state.db is None:
        logger.warning("DATABASE_URL not set, database unavailable")
    else:
        logger.info("Using MongoDB database %s", app.state.db.name)
        sweeper = asyncio.create_task(run_sweeper(app.state.db))
    yield
    if sweeper is not None:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper
        logger.info("Presence sweeper stopped")


def get_db(request: Request) -> Database:
    db = request.app.state.db
    if db is None:
        raise HTTPException(status_code=500, detail="Database not available")
    return db


def create_app(db: Optional[Database] = None) -> FastAPI:
    app = FastAPI(title="Chat & Receitas API", lifespan=lifespan)
    app.state.db = db

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(PyMongoError)
    async def store_error_handler(request: Request, exc: PyMongoError):
        logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.get("/")
    def read_root():
        return {"message": "Chat API ready"}

    @app.get("/test")
    def test_database(request: Request):
        db = request.app.state.db
        response = {
            "backend": "✅ Running",
            "database": "❌ Not Available",
            "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
            "database_name": None,
            "connection_status": "Not Connected",
            "collections": []
        }
        if db is None:
            return response
        response["database_name"] = db.name
        try:
            response["collections"] = db.list_collection_names()
            response["database"] = "✅ Connected & Working"
            response["connection_status"] = "Connected"
        except PyMongoError as e:
            response["database"] = f"⚠️ Connected but Error: {str(e)[:80]}"
        return response

    # Participants
    @app.post("/participants", status_code=status.HTTP_201_CREATED)
    def create_participant(payload: JoinRequest, db: Database = Depends(get_db)):
        try:
            chat.join(db, payload.name)
        except ParticipantExists as e:
            raise HTTPException(status_code=409, detail=str(e)) from e
        return Response(status_code=status.HTTP_201_CREATED)

    @app.get("/participants")
    def list_participants(db: Database = Depends(get_db)) -> List[dict]:
        return chat.list_participants(db)

    @app.post("/status")
    def keep_alive(user: Optional[str] = Header(None), db: Database = Depends(get_db)):
        try:
            chat.heartbeat(db, user)
        except ParticipantMissing as e:
            raise HTTPException(status_code=404, detail=str(e)) from e
        return Response(status_code=status.HTTP_200_OK)

    # Messages
    @app.post("/messages", status_code=status.HTTP_201_CREATED)
    def send_message(
        payload: MessageRequest,
        user: Optional[str] = Header(None),
        db: Database = Depends(get_db),
    ):
        try:
            chat.post_message(db, user, payload)
        except ParticipantMissing as e:
            raise HTTPException(status_code=409, detail=str(e)) from e
        return Response(status_code=status.HTTP_201_CREATED)

    @app.get("/messages")
    def list_messages(
        limit: Optional[str] = None,
        user: Optional[str] = Header(None),
        db: Database = Depends(get_db),
    ) -> List[dict]:
        try:
            return chat.list_messages(db, user, limit)
        except ParticipantMissing as e:
            raise HTTPException(status_code=409, detail=str(e)) from e
        except InvalidLimit as e:
            raise HTTPException(status_code=422, detail=str(e)) from e

    @app.delete("/messages/{message_id}")
    def delete_message(
        message_id: str,
        user: Optional[str] = Header(None),
        db: Database = Depends(get_db),
    ):
        try:
            chat.delete_message(db, message_id, user)
        except NotFound as e:
            raise HTTPException(status_code=404, detail=str(e)) from e
        except Unauthorized as e:
            raise HTTPException(status_code=401, detail=str(e)) from e
        return Response(status_code=status.HTTP_200_OK)

    @app.put("/messages/{message_id}")
    def update_message(
        message_id: str,
        payload: MessageRequest,
        user: Optional[str] = Header(None),
        db: Database = Depends(get_db),
    ):
        try:
            chat.update_message(db, message_id, user, payload)
        except NotFound as e:
            raise HTTPException(status_code=404, detail=str(e)) from e
        except Unauthorized as e:
            raise HTTPException(status_code=401, detail=str(e)) from e
        return Response(status_code=status.HTTP_200_OK)

    # Receitas
    @app.post("/receitas", status_code=status.HTTP_201_CREATED)
    def create_recipe(payload: RecipeRequest, db: Database = Depends(get_db)):
        return recipes.create_recipe(db, payload)

    @app.get("/receitas")
    def list_recipes(db: Database = Depends(get_db)) -> List[dict]:
        return recipes.list_recipes(db)

    @app.get("/receitas/{recipe_id}")
    def get_recipe(recipe_id: str, db: Database = Depends(get_db)):
        try:
            return recipes.get_recipe(db, recipe_id)
        except NotFound as e:
            raise HTTPException(status_code=404, detail=str(e)) from e

    @app.delete("/receitas/muitas/{filtroIngredientes}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_recipes_by_ingredients(filtroIngredientes: str, db: Database = Depends(get_db)):
        recipes.delete_by_ingredients(db, filtroIngredientes)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.delete("/receitas/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_recipe(recipe_id: str, db: Database = Depends(get_db)):
        try:
            recipes.delete_recipe(db, recipe_id)
        except NotFound as e:
            raise HTTPException(status_code=404, detail=str(e)) from e
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.put("/receitas/muitas/{filtroIngredientes}")
    def update_recipes_by_ingredients(
        filtroIngredientes: str,
        payload: Optional[RecipeTitleRequest] = None,
        db: Database = Depends(get_db),
    ):
        recipes.update_by_ingredients(db, filtroIngredientes, payload if payload is not None else RecipeTitleRequest())
        return Response(status_code=status.HTTP_200_OK)

    @app.put("/receitas/{recipe_id}")
    def update_recipe(
        recipe_id: str,
        payload: Optional[RecipeRequest] = None,
        db: Database = Depends(get_db),
    ):
        # No body at all overwrites every field with null.
        try:
            recipes.update_recipe(db, recipe_id, payload if payload is not None else RecipeRequest())
        except NotFound as e:
            raise HTTPException(status_code=404, detail=str(e)) from e
        return "Receita atualizada!"

    return app


app = create_app(database.db)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
