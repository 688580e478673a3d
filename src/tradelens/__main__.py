from tradelens.cli import app

app()
