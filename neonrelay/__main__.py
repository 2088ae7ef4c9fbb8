from neonrelay.relay.cli import app

app()
