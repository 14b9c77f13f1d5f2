import base64

from flask import Flask, abort, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

import config
from ledger.store import Ledger
from sharevote.distribution import distribute_shares
from sharevote.errors import UnknownAccount, VoteError


def _body():
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        abort(400, description="Request body must be a JSON object")
    return body


def _require(payload, key):
    if key not in payload:
        abort(400, description=f"Missing field '{key}'")
    return payload[key]


def create_app(ledger=None):
    app = Flask(__name__)
    CORS(app)
    ledger = ledger or Ledger()
    app.config["LEDGER"] = ledger

    def signed():
        body = _body()
        payload = body.get("payload", {})
        if not isinstance(payload, dict):
            abort(400, description="payload must be a JSON object")
        signer = ledger.authenticate(request.path, body)
        return signer, payload

    @app.errorhandler(VoteError)
    def vote_error(e):
        return jsonify(e.to_dict()), e.status

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify({"error": e.name, "message": e.description}), e.code

    @app.route('/identity/register', methods=['POST'])
    def register_identity():
        public_key = _require(_body(), 'public_key')
        if not isinstance(public_key, str):
            abort(400, description="public_key is not a PEM encoded key")
        try:
            account_id = ledger.register_identity(public_key)
        except ValueError:
            abort(400, description="public_key is not a PEM encoded key")
        return jsonify({"account_id": account_id})

    @app.route('/ballot/initialize', methods=['POST'])
    def initialize():
        signer, payload = signed()
        try:
            content = base64.b64decode(_require(payload, 'upgrade_content'), validate=True)
        except (TypeError, ValueError):
            abort(400, description="upgrade_content must be base64")
        ballot = ledger.transact(
            "initialize", signer, None,
            lambda: ledger.program.initialize(
                signer, content,
                threshold=payload.get('threshold'),
                total_voters=payload.get('total_voters'),
            )
        )
        return jsonify(ballot.to_dict()), 201

    @app.route('/ballot/<ballot_id>/polynomial', methods=['POST'])
    def create_polynomial(ballot_id):
        signer, payload = signed()
        voters = payload.get('voters') or []
        if not isinstance(voters, list) or not all(isinstance(v, str) for v in voters):
            abort(400, description="voters must be a list of account ids")
        public_keys = {}
        for account_id in voters:
            if account_id not in ledger.identities:
                raise UnknownAccount(f"Voter identity {account_id} is not registered")
            public_keys[account_id] = ledger.identities[account_id]
        if len(public_keys) > ledger.program.get_ballot(ballot_id).total_voters:
            abort(400, description="More voters than shares to distribute")

        shares = ledger.transact(
            "create_polynomial_and_distribute_shares", signer, ballot_id,
            lambda: ledger.program.create_polynomial_and_distribute_shares(
                ballot_id, signer,
                coefficients=payload.get('coefficients'),
                secret=payload.get('secret'),
            )
        )
        response = {"shares": [list(share) for share in shares]}
        if public_keys:
            envelopes = distribute_shares(shares, public_keys)
            response["envelopes"] = {
                account_id: base64.b64encode(ciphertext).decode('utf-8')
                for account_id, ciphertext in envelopes.items()
            }
        return jsonify(response)

    @app.route('/ballot/<ballot_id>/voters', methods=['POST'])
    def initialize_voter(ballot_id):
        signer, payload = signed()
        x = _require(payload, 'x')
        y = _require(payload, 'y')
        voter = ledger.transact(
            "initialize_voter", signer, ballot_id,
            lambda: ledger.program.initialize_voter(ballot_id, signer, x, y)
        )
        return jsonify(voter.to_dict(include_share=False)), 201

    @app.route('/voter/<voter_id>/vote', methods=['POST'])
    def submit_vote(voter_id):
        signer, payload = signed()
        is_yes = _require(payload, 'is_yes')
        if not isinstance(is_yes, bool):
            abort(400, description="is_yes must be a boolean")
        ballot = ledger.transact(
            "submit_vote", signer, ledger.ballot_of_voter(voter_id),
            lambda: ledger.program.submit_vote(voter_id, signer, is_yes)
        )
        return jsonify(ledger.program.tally(ballot.ballot_id))

    @app.route('/ballot/<ballot_id>/compute', methods=['POST'])
    def compute_result(ballot_id):
        ledger.transact(
            "compute_result", None, ballot_id,
            lambda: ledger.program.compute_result(ballot_id)
        )
        return jsonify(ledger.program.tally(ballot_id))

    @app.route('/ballot/<ballot_id>/upgrade', methods=['POST'])
    def apply_upgrade(ballot_id):
        signer, _ = signed()
        content = ledger.transact(
            "apply_upgrade", signer, ballot_id,
            lambda: ledger.program.apply_upgrade(ballot_id, signer)
        )
        return jsonify({
            "applied": True,
            "content": base64.b64encode(content).decode('utf-8')
        })

    @app.route('/ballot/<ballot_id>', methods=['GET'])
    def ballot_status(ballot_id):
        return jsonify(ledger.program.get_ballot(ballot_id).to_dict())

    @app.route('/ballot/<ballot_id>/voters', methods=['GET'])
    def ballot_voters(ballot_id):
        ledger.program.get_ballot(ballot_id)
        return jsonify([
            voter.to_dict(include_share=False)
            for voter in ledger.program.registry.for_ballot(ballot_id)
        ])

    @app.route('/ballot/<ballot_id>/upgrade-file', methods=['GET'])
    def upgrade_file_status(ballot_id):
        return jsonify(ledger.program.get_upgrade_file(ballot_id).to_dict())

    @app.route('/voter/<voter_id>', methods=['GET'])
    def voter_status(voter_id):
        return jsonify(ledger.program.get_voter(voter_id).to_dict(include_share=False))

    @app.route('/ballot/<ballot_id>/log', methods=['GET'])
    def ballot_log(ballot_id):
        log = ledger.tx_log.get_log(ballot_id)
        if log is None:
            return jsonify({"error": "UnknownAccount", "message": "No transactions for ballot"}), 404
        return jsonify(log)

    return app


if __name__ == '__main__':
    config.configure_logging()
    config.Config.ensure_data_dir()
    create_app().run(
        host=config.Config.LEDGER_HOST,
        port=config.Config.LEDGER_PORT,
        threaded=True
    )
