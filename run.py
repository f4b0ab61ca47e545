import uvicorn

from topic_hub.config.settings import settings

if __name__ == "__main__":
    uvicorn.run(
        app="topic_hub.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=settings.PORT,
        env_file=".env",
        reload=True,
        reload_dirs=["topic_hub"],
        log_level="info"
    )
else:
    from topic_hub.main import create_app

    app = create_app()
