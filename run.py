#!/usr/bin/env python3
"""
StyleHub launch API start-up script
"""

import uvicorn
from app.core.config import settings

if __name__ == "__main__":
    print("🚀 Starting StyleHub launch API...")
    print(f"📡 Port: {settings.API_PORT}")
    print(f"🌐 Environment: {settings.NODE_ENV}")
    print(f"⏱️ Launch mode: {settings.LAUNCH_MODE}")
    print(f"💚 Health check: http://localhost:{settings.API_PORT}/health")
    
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.API_PORT,
        reload=settings.NODE_ENV == "development",
        log_level="info"
    )
