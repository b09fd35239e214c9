from ewallet_ums.main import run

run()
