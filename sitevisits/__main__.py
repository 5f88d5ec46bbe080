# sitevisits/__main__.py
import uvicorn

from sitevisits.core.config import settings

if __name__ == "__main__":
    uvicorn.run("sitevisits.main:app", host="0.0.0.0", port=settings.PORT, proxy_headers=True)
