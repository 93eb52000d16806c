import uvicorn
from dotenv import load_dotenv

if __name__ == "__main__":
    load_dotenv()
    from backend.config import HOST, PORT
    uvicorn.run("backend.main:app", host=HOST, port=PORT, reload=False)
