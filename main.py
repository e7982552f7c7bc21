from sunforge.script import start

if __name__ == "__main__":
    start()
