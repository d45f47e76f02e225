from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import get_setting, setup_logging
from functions import handlers

setup_logging()

app = FastAPI(title="honest-dating functions", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


@app.get("/health")
async def health_check():
    return {"status": "healthy", "functions": sorted(handlers.HANDLERS)}


@app.post("/functions/v1/{name}")
def invoke_function(name: str):
    status, body = handlers.invoke(name)
    return JSONResponse(content=body, status_code=status)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "server:app",
        host="0.0.0.0",
        port=int(get_setting("PORT", 8001)),
    )
