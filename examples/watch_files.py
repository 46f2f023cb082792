import logging
import sys
import time

from live_config import Configuration

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    # e.g. python watch_files.py app.properties app.yaml
    with Configuration.from_files(*sys.argv[1:]) as cfg:
        for key in cfg:
            cfg.on_change(key, lambda value, key=key: print(f"{key} -> {value}"))
        print("Watching:", cfg.watches)
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            pass
