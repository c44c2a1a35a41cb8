from typing import List
import httpx
from app.settings import settings

EMBEDDING_DIM = 768


async def embed_texts_gemini(texts: List[str]) -> List[List[float]]:
    api_key = settings.GEMINI_API_KEY
    model = settings.GEMINI_EMBEDDING_MODEL
    if not api_key:
        return [[0.0] * EMBEDDING_DIM for _ in texts]
    url = f"{settings.GEMINI_API_BASE.rstrip('/')}/models/{model}:batchEmbedContents"
    headers = {"x-goog-api-key": api_key}
    payload = {
        "requests": [
            {"model": f"models/{model}", "content": {"parts": [{"text": t}]}}
            for t in texts
        ]
    }
    async with httpx.AsyncClient(timeout=60) as client:
        r = await client.post(url, headers=headers, json=payload)
        r.raise_for_status()
        data = r.json()
    return [item["values"] for item in data["embeddings"]]
