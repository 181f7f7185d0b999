#!/usr/bin/env python3
"""
Script helper para ejecutar la API FastAPI.
Ejecuta desde la raíz del proyecto para asegurar que Python encuentre el módulo 'api'.
"""

import sys

if __name__ == "__main__":
    try:
        import uvicorn
        print("🚀 Iniciando API FastAPI en http://localhost:8000")
        print("📖 Documentación disponible en http://localhost:8000/docs")
        uvicorn.run("api.main:app", host="0.0.0.0", port=8000, reload=True)
    except ImportError as e:
        print(f"❌ Error: No se pudo importar uvicorn. ¿Instalaste las dependencias?")
        print(f"   Ejecuta: pip install -e .")
        print(f"   Error: {e}")
        sys.exit(1)
