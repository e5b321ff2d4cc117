from fastapi import FastAPI
from koyomi.api.public import router as public_router

app = FastAPI(title="koyomi public api")
app.include_router(public_router)
