#!/usr/bin/env python3
"""
Work Orders Entry Point

Run the application with:
    python run.py

Or with uvicorn directly:
    uvicorn workorders.main:app --reload --port 8000
"""
import uvicorn

from workorders.config import get_settings


def main():
    """Run the Work Orders server"""
    settings = get_settings()
    print("=" * 50)
    print("  Work Orders - заказ-наряды автосервиса")
    print("=" * 50)
    print(f"  Server:  http://{settings.HOST}:{settings.PORT}")
    print(f"  Data:    {settings.DATA_DIR}")
    print(f"  Uploads: {settings.UPLOAD_DIR}")
    print(f"  Debug:   {settings.DEBUG}")
    print("=" * 50)
    print()

    uvicorn.run(
        "workorders.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )


if __name__ == "__main__":
    main()
