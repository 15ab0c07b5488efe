from webhook_mailer.server import run


if __name__ == "__main__":
    run()
