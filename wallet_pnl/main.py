"""
Wallet PnL API
==============
Main application entry point. Mounts all routers.
"""
from fastapi import FastAPI
from wallet_pnl.api.routers import pnl
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("wallet_pnl.main")

app = FastAPI(title="Wallet PnL API", version="1.0.0")
# ----- Mount Routers -----
# Wallet PnL — serves /pnl/*
app.include_router(pnl.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
