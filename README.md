# pikiclient

The non-graphical parts of a pixiv client as a small Python library. It has five modules.

- **`pikiclient.login`** handles the OAuth PKCE sign-in that pixiv's mobile apps use.
- **`pikiclient.accounts`** keeps track of the current account, the tokens and the other known accounts.
- **`pikiclient.cache`** is a SQLite cache of tag search history and of accounts.
- **`pikiclient.downloader`** downloads images into a cache directory.
- **`pikiclient.config`** holds the settings and sets up the HTTP session.

## Installing

```
pip install pikiclient
```

For the test suite, install it with the `test` extra and run `pytest`:

```
pip install "pikiclient[test]"
pytest
```

## Configuration

`PikiConfig(cache_path, cache_size=0)` holds two settings: where cached data lives and how large the network cache may grow. It gives you the following values:

- `database_path` is `cache_path / "data.sqlite"`.
- `cache_limit` is the limit in bytes for the current `cache_size`.

The helper functions are:

- `cache_limit(cache_size)` returns `2**cache_size` GiB in bytes. A setting of 8 returns `9223372036854775807`, which stands for no limit. A negative setting raises `ValueError`.
- `network_cache_dir(config)` returns `config.cache_path / "cache"`.
- `make_session()` returns a `requests.Session` that sends `Referer: https://app-api.pixiv.net/` with every request.

## Logging in

```python
from pikiclient.config import make_session
from pikiclient.login import LoginProcessor, extract_callback_code

session = make_session()
processor = LoginProcessor(client_id="your-client-id", client_secret="secret", session=session)

login_url = processor.begin()
# Open login_url in a browser. When the browser is sent to the callback URL, pass that URL on:
code = extract_callback_code(callback_url)
body = processor.finish(code)
```

What each step does:

- `begin()` creates a new 32-character code verifier and stores it in `processor.code_verifier`. It returns the login URL with the S256 `code_challenge` added.
- `finish(code)` posts the code and the verifier to the token endpoint. It returns the response body as text.

The helpers can also be used on their own:

- `generate_code_verifier(length=32)` returns a random verifier. The characters are letters, digits and `-._~`.
- `code_challenge(verifier)` returns the unpadded base64url encoding of the verifier's SHA-256 hash.
- `extract_callback_code(url)` returns the `code` query value of a callback URL. It returns `""` if the callback URL has no code, and `None` for any URL that is not the callback URL.

## Accounts

```python
from pikiclient.accounts import LoginHandler, SecretStore
from pikiclient.cache import Cache

cache = Cache("/path/to/cache/data.sqlite")
cache.setup()

handler = LoginHandler(SecretStore("/path/to/secrets.json"), cache)
user = handler.save_user(body)     # caches the account from a token response
handler.set_user(user.account)     # makes it current and refreshes other_users
handler.write_token("token")
handler.get_token()
handler.refresh_other_users()      # cached accounts except the current one
```

### SecretStore

`SecretStore` is a key-value store kept as a JSON file.

- `read(key)` returns the stored value. It returns `""` if nothing is stored under the key.
- `write(key, value)` saves the whole file again. It replaces the file in a single step.
- The current account is stored under the key `current_user`.
- Each token is stored under the name of its account.
- The file is **not encrypted**. Protect it with file permissions.

### Reading a token response

`user_from_auth_response(data)` builds a `User` from a token response. It looks for the `user` object either at the top level or under `response`. It raises `ValueError` when either of these is missing:

- the `user` object;
- a numeric `id` in that object.

### LoginHandler

- `remove_user(user)` clears the account's token and deletes the account from the cache.
- `save_user(data)` raises `sqlite3.IntegrityError` if an account with that id is already cached.

## Tag history

`Cache.push_tag_history(tags)` records each `Tag(name, translated_name="")` that has a name. Tags with an empty name are skipped. For each tag it records:

- **A new tag:** the tag is stored.
- **A known tag with no translation:** it takes the translation it is given now.
- **Every tag:** its use count goes up by one.

`Cache.get_tag_history()` returns up to 20 tags, the most used first.

The `Cache` object also works as a context manager. Use `Cache.close()` or a `with` block to close the connection.

## Downloading images

```python
from pikiclient.config import make_session
from pikiclient.downloader import ImageDownloader

downloader = ImageDownloader("/path/to/images", make_session())
location = downloader.download("https://i.pximg.net/img-original/img/12345_p0.jpg")
```

An image is saved in the cache directory under the last path segment of its URL. See `cache_file_name(url)`. The cache directory is created if it does not exist.

`download` returns one of these:

- **The image is already cached:** a `file://` location. The image is not fetched again.
- **The server answers with status 200:** a `file://` location for the newly written file.
- **Any other status, or a request error:** the relative path `../assets/pixiv_no_profile.png`. The package does not ship that image.

While a download runs, `downloader.progress` counts the bytes received. `downloader.total` holds the announced `Content-Length`, or `-1` if the server gave none.

## What it does not do

pikiclient has no user interface and no command-line program. It has no embedded browser either. The application must do these things itself:

- open the login URL;
- catch the callback URL;
- pass the callback URL to `extract_callback_code`.

It does not call the pixiv API apart from the token exchange. It does not refresh tokens.

It does not keep a general HTTP response cache on disk. `cache_limit` and `network_cache_dir` only compute the values that such a cache would use.