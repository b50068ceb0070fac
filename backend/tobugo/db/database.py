"""
Trip, chat-session and community persistence

Two interchangeable stores with the same async CRUD contract:
- MongoStorage: MongoDB through motor, used when MONGODB_URI is set
- InMemoryStorage: dictionaries, used in local dev and tests

One instance is created at startup (see create_storage) and held on
app.state for the life of the process.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient
from pydantic import BaseModel
from pymongo import ReturnDocument
from pymongo.server_api import ServerApi

from tobugo.core.config import DATABASE_NAME, MONGODB_URI
from tobugo.models.chat import ChatSession
from tobugo.models.review import Review, SavedTrip
from tobugo.models.trip import Trip


def _to_document(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, list):
        return [_to_document(v) for v in value]
    if isinstance(value, dict):
        return {k: _to_document(v) for k, v in value.items()}
    return value


class Storage(ABC):
    """Async CRUD contract shared by every store."""

    async def init(self) -> None:
        return None

    async def close(self) -> None:
        return None

    # ---- Trips ----
    @abstractmethod
    async def create_trip(self, trip: Trip) -> Trip:
        ...

    @abstractmethod
    async def get_trip(self, trip_id: str) -> Trip | None:
        ...

    @abstractmethod
    async def list_trips_by_user(self, user_id: str) -> list[Trip]:
        ...

    @abstractmethod
    async def list_public_trips(self) -> list[Trip]:
        ...

    @abstractmethod
    async def update_trip(self, trip_id: str, updates: dict[str, Any]) -> Trip | None:
        ...

    @abstractmethod
    async def delete_trip(self, trip_id: str) -> bool:
        ...

    # ---- Chat sessions ----
    @abstractmethod
    async def create_chat_session(self, session: ChatSession) -> ChatSession:
        ...

    @abstractmethod
    async def get_chat_session(self, session_id: str) -> ChatSession | None:
        ...

    @abstractmethod
    async def list_chat_sessions_by_user(self, user_id: str) -> list[ChatSession]:
        ...

    @abstractmethod
    async def update_chat_session(self, session_id: str, updates: dict[str, Any]) -> ChatSession | None:
        ...

    # ---- Reviews ----
    @abstractmethod
    async def create_review(self, review: Review) -> Review:
        ...

    @abstractmethod
    async def list_reviews_by_trip(self, trip_id: str) -> list[Review]:
        ...

    @abstractmethod
    async def list_reviews_by_user(self, user_id: str) -> list[Review]:
        ...

    # ---- Saved trips ----
    @abstractmethod
    async def create_saved_trip(self, saved: SavedTrip) -> SavedTrip:
        """Bookmark a trip; saving the same trip twice returns the first record."""

    @abstractmethod
    async def list_saved_trips_by_user(self, user_id: str) -> list[Trip]:
        """The bookmarked trips themselves, most recently saved first."""

    @abstractmethod
    async def delete_saved_trip(self, user_id: str, trip_id: str) -> bool:
        ...


class InMemoryStorage(Storage):
    """Process-local store. Records are copied in and out, never shared."""

    def __init__(self) -> None:
        self.trips: dict[str, Trip] = {}
        self.sessions: dict[str, ChatSession] = {}
        self.reviews: dict[str, Review] = {}
        self.saved_trips: dict[str, SavedTrip] = {}

    async def create_trip(self, trip: Trip) -> Trip:
        self.trips[trip.id] = trip.model_copy(deep=True)
        return trip

    async def get_trip(self, trip_id: str) -> Trip | None:
        trip = self.trips.get(trip_id)
        return trip.model_copy(deep=True) if trip else None

    async def list_trips_by_user(self, user_id: str) -> list[Trip]:
        trips = [t for t in self.trips.values() if t.user_id == user_id]
        return sorted((t.model_copy(deep=True) for t in trips), key=lambda t: t.created_at, reverse=True)

    async def list_public_trips(self) -> list[Trip]:
        trips = [t for t in self.trips.values() if t.is_public]
        return sorted((t.model_copy(deep=True) for t in trips), key=lambda t: t.created_at, reverse=True)

    async def update_trip(self, trip_id: str, updates: dict[str, Any]) -> Trip | None:
        trip = self.trips.get(trip_id)
        if trip is None:
            return None
        data = {**trip.model_dump(), **_to_document(updates), "updated_at": datetime.utcnow()}
        updated = Trip.model_validate(data)
        self.trips[trip_id] = updated
        return updated.model_copy(deep=True)

    async def delete_trip(self, trip_id: str) -> bool:
        return self.trips.pop(trip_id, None) is not None

    async def create_chat_session(self, session: ChatSession) -> ChatSession:
        self.sessions[session.id] = session.model_copy(deep=True)
        return session

    async def get_chat_session(self, session_id: str) -> ChatSession | None:
        session = self.sessions.get(session_id)
        return session.model_copy(deep=True) if session else None

    async def list_chat_sessions_by_user(self, user_id: str) -> list[ChatSession]:
        sessions = [s for s in self.sessions.values() if s.user_id == user_id]
        return sorted((s.model_copy(deep=True) for s in sessions), key=lambda s: s.created_at, reverse=True)

    async def update_chat_session(self, session_id: str, updates: dict[str, Any]) -> ChatSession | None:
        session = self.sessions.get(session_id)
        if session is None:
            return None
        data = {**session.model_dump(), **_to_document(updates), "updated_at": datetime.utcnow()}
        updated = ChatSession.model_validate(data)
        self.sessions[session_id] = updated
        return updated.model_copy(deep=True)

    async def create_review(self, review: Review) -> Review:
        self.reviews[review.id] = review.model_copy(deep=True)
        return review

    async def list_reviews_by_trip(self, trip_id: str) -> list[Review]:
        reviews = [r for r in self.reviews.values() if r.trip_id == trip_id]
        return sorted((r.model_copy() for r in reviews), key=lambda r: r.created_at, reverse=True)

    async def list_reviews_by_user(self, user_id: str) -> list[Review]:
        reviews = [r for r in self.reviews.values() if r.user_id == user_id]
        return sorted((r.model_copy() for r in reviews), key=lambda r: r.created_at, reverse=True)

    async def create_saved_trip(self, saved: SavedTrip) -> SavedTrip:
        for existing in self.saved_trips.values():
            if (existing.user_id, existing.trip_id) == (saved.user_id, saved.trip_id):
                return existing.model_copy()
        self.saved_trips[saved.id] = saved.model_copy()
        return saved

    async def list_saved_trips_by_user(self, user_id: str) -> list[Trip]:
        saved = sorted(
            (s for s in self.saved_trips.values() if s.user_id == user_id),
            key=lambda s: s.created_at,
            reverse=True,
        )
        # Bookmarks of deleted trips are skipped
        return [self.trips[s.trip_id].model_copy(deep=True) for s in saved if s.trip_id in self.trips]

    async def delete_saved_trip(self, user_id: str, trip_id: str) -> bool:
        for saved_id, saved in list(self.saved_trips.items()):
            if (saved.user_id, saved.trip_id) == (user_id, trip_id):
                del self.saved_trips[saved_id]
                return True
        return False


class MongoStorage(Storage):
    """MongoDB store; documents use the model id as _id."""

    def __init__(self, client: AsyncIOMotorClient, database_name: str = DATABASE_NAME) -> None:
        self._client = client
        self._database = client[database_name]
        self.trips = self._database.trips
        self.sessions = self._database.chat_sessions
        self.reviews = self._database.reviews
        self.saved_trips = self._database.saved_trips

    @classmethod
    def connect(cls, uri: str, database_name: str = DATABASE_NAME) -> "MongoStorage":
        client = AsyncIOMotorClient(uri, server_api=ServerApi("1"))
        print(f"✅ Connected to MongoDB database: {database_name}")
        return cls(client, database_name)

    async def init(self) -> None:
        """Ping the server and create indexes; failures are reported, not fatal."""
        try:
            await self._database.command("ping")
            print("✅ MongoDB connection successful!")
        except Exception as e:
            print(f"❌ MongoDB connection failed: {e}")
            return
        try:
            await self.trips.create_index("user_id")
            await self.trips.create_index([("is_public", 1), ("created_at", -1)], name="public_recent")
            await self.sessions.create_index("user_id")
            await self.reviews.create_index([("trip_id", 1), ("created_at", -1)])
            await self.reviews.create_index([("user_id", 1), ("created_at", -1)])
            await self.saved_trips.create_index([("user_id", 1), ("trip_id", 1)], unique=True)
            print("✅ Database indexes created successfully")
        except Exception as e:
            print(f"⚠️  Index creation warning: {e}")

    async def close(self) -> None:
        self._client.close()
        print("🔌 Closed MongoDB connection")

    @staticmethod
    def _trip(doc: dict | None) -> Trip | None:
        if not doc:
            return None
        doc = dict(doc)
        doc["id"] = str(doc.pop("_id"))
        return Trip.model_validate(doc)

    @staticmethod
    def _session(doc: dict | None) -> ChatSession | None:
        if not doc:
            return None
        doc = dict(doc)
        doc["id"] = str(doc.pop("_id"))
        return ChatSession.model_validate(doc)

    @staticmethod
    def _review(doc: dict) -> Review:
        doc = dict(doc)
        doc["id"] = str(doc.pop("_id"))
        return Review.model_validate(doc)

    async def create_trip(self, trip: Trip) -> Trip:
        doc = trip.model_dump()
        doc["_id"] = doc.pop("id")
        await self.trips.insert_one(doc)
        return trip

    async def get_trip(self, trip_id: str) -> Trip | None:
        return self._trip(await self.trips.find_one({"_id": trip_id}))

    async def list_trips_by_user(self, user_id: str) -> list[Trip]:
        docs = await self.trips.find({"user_id": user_id}).sort("created_at", -1).to_list(length=None)
        return [self._trip(d) for d in docs]

    async def list_public_trips(self) -> list[Trip]:
        docs = await self.trips.find({"is_public": True}).sort("created_at", -1).to_list(length=None)
        return [self._trip(d) for d in docs]

    async def update_trip(self, trip_id: str, updates: dict[str, Any]) -> Trip | None:
        doc = await self.trips.find_one_and_update(
            {"_id": trip_id},
            {"$set": {**_to_document(updates), "updated_at": datetime.utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        return self._trip(doc)

    async def delete_trip(self, trip_id: str) -> bool:
        result = await self.trips.delete_one({"_id": trip_id})
        return result.deleted_count > 0

    async def create_chat_session(self, session: ChatSession) -> ChatSession:
        doc = session.model_dump()
        doc["_id"] = doc.pop("id")
        await self.sessions.insert_one(doc)
        return session

    async def get_chat_session(self, session_id: str) -> ChatSession | None:
        return self._session(await self.sessions.find_one({"_id": session_id}))

    async def list_chat_sessions_by_user(self, user_id: str) -> list[ChatSession]:
        docs = await self.sessions.find({"user_id": user_id}).sort("created_at", -1).to_list(length=None)
        return [self._session(d) for d in docs]

    async def update_chat_session(self, session_id: str, updates: dict[str, Any]) -> ChatSession | None:
        doc = await self.sessions.find_one_and_update(
            {"_id": session_id},
            {"$set": {**_to_document(updates), "updated_at": datetime.utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        return self._session(doc)

    async def create_review(self, review: Review) -> Review:
        doc = review.model_dump()
        doc["_id"] = doc.pop("id")
        await self.reviews.insert_one(doc)
        return review

    async def list_reviews_by_trip(self, trip_id: str) -> list[Review]:
        docs = await self.reviews.find({"trip_id": trip_id}).sort("created_at", -1).to_list(length=None)
        return [self._review(d) for d in docs]

    async def list_reviews_by_user(self, user_id: str) -> list[Review]:
        docs = await self.reviews.find({"user_id": user_id}).sort("created_at", -1).to_list(length=None)
        return [self._review(d) for d in docs]

    async def create_saved_trip(self, saved: SavedTrip) -> SavedTrip:
        doc = await self.saved_trips.find_one_and_update(
            {"user_id": saved.user_id, "trip_id": saved.trip_id},
            {"$setOnInsert": {"_id": saved.id, "created_at": saved.created_at}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        doc = dict(doc)
        doc["id"] = str(doc.pop("_id"))
        return SavedTrip.model_validate(doc)

    async def list_saved_trips_by_user(self, user_id: str) -> list[Trip]:
        saved = await self.saved_trips.find({"user_id": user_id}).sort("created_at", -1).to_list(length=None)
        order = [s["trip_id"] for s in saved]
        docs = await self.trips.find({"_id": {"$in": order}}).to_list(length=None)
        by_id = {d["_id"]: self._trip(d) for d in docs}
        return [by_id[trip_id] for trip_id in order if trip_id in by_id]

    async def delete_saved_trip(self, user_id: str, trip_id: str) -> bool:
        result = await self.saved_trips.delete_one({"user_id": user_id, "trip_id": trip_id})
        return result.deleted_count > 0


def create_storage(uri: str | None = MONGODB_URI) -> Storage:
    if uri:
        return MongoStorage.connect(uri)
    print("⚠️  MONGODB_URI is not set; using in-memory storage")
    return InMemoryStorage()


__all__ = ["Storage", "InMemoryStorage", "MongoStorage", "create_storage"]
