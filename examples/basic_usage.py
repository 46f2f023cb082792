import logging

from live_config import Configuration

if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)

    cfg = Configuration({"db.host": "localhost", "feature.search": "false"})

    def on_pool_size(size):
        print("Pool size changed:", size)

    cfg.on_change_int("db.pool.size", on_pool_size)

    cfg.set("db.url", "jdbc:postgresql://${db.host}:${db.port:5432}/app")
    cfg.set("db.pool.size", "20")
    print("URL:", cfg.get("db.url"))
    print("Search enabled:", cfg.get_bool("feature.search", False))

    cfg.set("feature.search", "true")
    print("Search enabled:", cfg.get_bool("feature.search", False))
    print("Snapshot:", cfg.as_map())
