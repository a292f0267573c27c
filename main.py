import sys

import uvicorn

from pairlink.core.config import settings

APP_URI = "pairlink.main:app"


def main():
    # The claim cache is per process: with several workers a bot callback and the
    # client's poll can land on different workers. Keep workers_count=1 unless a
    # sticky load balancer routes a pairing code to one worker.
    if settings.debug or not sys.platform.startswith("linux"):
        uvicorn.run(
            app=APP_URI,
            host=settings.backend_host,
            port=settings.backend_port,
            reload=settings.reload_uvicorn,
            workers=settings.workers_count,
        )
        return

    from pairlink.web import GunicornApplication

    options = {
        "bind": f"{settings.backend_host}:{settings.backend_port}",
        "workers": settings.workers_count,
        "worker_class": "uvicorn.workers.UvicornWorker",
    }
    GunicornApplication(APP_URI, options).run()


if __name__ == "__main__":
    main()
