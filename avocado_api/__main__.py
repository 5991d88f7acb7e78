from avocado_api.main import run

run()
