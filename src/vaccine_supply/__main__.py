from vaccine_supply.cli import app

app()
