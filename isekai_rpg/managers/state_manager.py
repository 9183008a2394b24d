from typing import List, Optional
import aiosqlite

from ..config import settings
from ..models.character import Character, CharacterSnapshot
from ..utils.logger import logger


async def init_db():
    async with aiosqlite.connect(settings.DB_PATH) as db:
        await db.execute("""
            CREATE TABLE IF NOT EXISTS characters (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                data TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        await db.commit()
    logger.info("Database initialized")


# --- Character CRUD ---

async def create_character(snapshot: CharacterSnapshot) -> Character:
    character = Character(**snapshot.model_dump())
    async with aiosqlite.connect(settings.DB_PATH) as db:
        await db.execute(
            "INSERT INTO characters (id, name, data, created_at) VALUES (?, ?, ?, ?)",
            (character.id, character.name, character.model_dump_json(), character.created_at.isoformat()),
        )
        await db.commit()
    logger.info(f"Created character: {character.id} - {character.name}")
    return character


async def get_character(character_id: str) -> Optional[Character]:
    async with aiosqlite.connect(settings.DB_PATH) as db:
        async with db.execute(
            "SELECT data FROM characters WHERE id = ?", (character_id,)
        ) as cursor:
            row = await cursor.fetchone()
    if row:
        return Character.model_validate_json(row[0])
    return None


async def list_characters() -> List[Character]:
    async with aiosqlite.connect(settings.DB_PATH) as db:
        async with db.execute(
            "SELECT data FROM characters ORDER BY created_at DESC"
        ) as cursor:
            rows = await cursor.fetchall()
    return [Character.model_validate_json(r[0]) for r in rows]


async def delete_character(character_id: str) -> bool:
    async with aiosqlite.connect(settings.DB_PATH) as db:
        cursor = await db.execute("DELETE FROM characters WHERE id = ?", (character_id,))
        await db.commit()
        deleted = cursor.rowcount > 0
    if deleted:
        logger.info(f"Deleted character: {character_id}")
    return deleted
