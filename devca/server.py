"""HTTP front end: issues certificate bundles and serves the web form."""

import json
import sys
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, Response, request
from pydantic import ValidationError

from devca.common.config import ca_paths, listen_address
from devca.common.errors import CAError, FormatError
from devca.common.protocol import CertRequest
from devca.crypto.pki import SigningIdentity, get_cert_fingerprint
from devca.storage.bundle import bundle_bytes
from devca.storage.ca_store import load_ca

STATIC_DIR = Path(__file__).with_name("static")


def bail(error, code: int) -> Response:
    print(f"❌ {error}")
    return Response(str(error), status=code, mimetype="text/plain")


def create_app(identity: SigningIdentity, static_folder=None) -> Flask:
    app = Flask(__name__, static_folder=str(static_folder or STATIC_DIR), static_url_path="")

    @app.route("/create-certificate", methods=["POST"])
    def create_certificate():
        # form field "data" carries {"commonName": ..., "names": [...], "ips": [...]}
        try:
            req = CertRequest(**json.loads(request.form.get("data", "")))
        except (ValueError, TypeError, ValidationError) as e:
            return bail(e, 400)

        try:
            cert = identity.issue(req.common_name, req.names, req.ips)
            body = bundle_bytes(cert)
        except FormatError as e:
            return bail(e, 400)
        except CAError as e:
            return bail(e, 500)

        print(f"✓ Issued certificate for {req.common_name!r} ({get_cert_fingerprint(cert.certificate)})")
        return Response(
            body,
            status=200,
            mimetype="application/zip",
            headers={"Content-Disposition": "attachment; filename=cert.zip"},
        )

    @app.route("/")
    def index():
        return app.send_static_file("index.html")

    return app


def main():
    # Load environment variables from .env file if it exists
    load_dotenv()

    try:
        ca = load_ca()
    except OSError as e:
        cert_path, key_path = ca_paths()
        print(f"❌ Unable to read CA files {cert_path} / {key_path}: {e}")
        print("   Generate them with: python scripts/gen_ca.py")
        return 1
    except FormatError as e:
        print(f"❌ Invalid CA material: {e}")
        return 1

    host, port = listen_address()
    print(f"Listening on port {port}")
    create_app(ca).run(host=host, port=port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
