from sitepulse.cli import app

app()
