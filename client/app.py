import base64

import requests
from tabulate import tabulate

import config
from client.storage import WalletStorage
from sharevote.distribution import decrypt_share
from sharevote.identity import Identity


class LedgerRequestError(Exception):
    def __init__(self, status_code, error, message):
        super().__init__(f"{error} ({status_code}): {message}")
        self.status_code = status_code
        self.error = error


class ShareVoteClient:
    def __init__(self, ledger_url=None, storage=None):
        self.ledger_url = ledger_url or config.Config.ledger_url()
        self.storage = storage or WalletStorage()

    def _post(self, route, identity=None, payload=None):
        body = identity.signed_request(route, payload or {}) if identity else {}
        response = requests.post(f"{self.ledger_url}{route}", json=body, timeout=10)
        return self._check(response)

    def _get(self, route):
        return self._check(requests.get(f"{self.ledger_url}{route}", timeout=10))

    @staticmethod
    def _check(response):
        if response.status_code >= 400:
            try:
                data = response.json()
            except ValueError:
                data = {"error": "HTTPError", "message": response.text}
            raise LedgerRequestError(response.status_code, data.get("error"), data.get("message"))
        return response.json()

    def identity(self, name):
        identity = self.storage.get_identity(name)
        if identity is None:
            raise KeyError(f"No identity named {name}")
        return identity

    def create_identity(self, name):
        identity = Identity(name)
        result = requests.post(
            f"{self.ledger_url}/identity/register",
            json={"public_key": identity.public_key},
            timeout=10
        )
        self._check(result)
        self.storage.store_identity(name, identity)
        return identity

    def create_ballot(self, dealer_name, upgrade_content: bytes, threshold, total_voters):
        dealer = self.identity(dealer_name)
        ballot = self._post("/ballot/initialize", dealer, {
            "upgrade_content": base64.b64encode(upgrade_content).decode('utf-8'),
            "threshold": threshold,
            "total_voters": total_voters
        })
        self.storage.store_ballot(ballot["ballot_id"], dealer=dealer_name)
        return ballot

    def distribute_shares(self, dealer_name, ballot_id, voter_names, secret=None):
        """Create the polynomial and hand each named voter an encrypted share"""
        dealer = self.identity(dealer_name)
        voters = {name: self.identity(name).account_id for name in voter_names}
        payload = {"voters": list(voters.values())}
        if secret is not None:
            payload["secret"] = secret
        result = self._post(f"/ballot/{ballot_id}/polynomial", dealer, payload)
        envelopes = result.get("envelopes", {})
        return {name: envelopes[account_id] for name, account_id in voters.items()}

    def register_voter(self, name, ballot_id, envelope_b64):
        identity = self.identity(name)
        share = decrypt_share(base64.b64decode(envelope_b64), identity)
        voter = self._post(f"/ballot/{ballot_id}/voters", identity, {"x": share.x, "y": share.y})
        self.storage.store_voter(ballot_id, name, voter["voter_id"], share)
        return voter

    def vote(self, name, ballot_id, is_yes):
        ballot = self.storage.get_ballot(ballot_id) or {}
        voter = ballot.get("voters", {}).get(name)
        if voter is None:
            raise KeyError(f"{name} is not registered on ballot {ballot_id}")
        return self._post(f"/voter/{voter['voter_id']}/vote", self.identity(name), {"is_yes": is_yes})

    def compute_result(self, ballot_id):
        return self._post(f"/ballot/{ballot_id}/compute")

    def apply_upgrade(self, name, ballot_id):
        result = self._post(f"/ballot/{ballot_id}/upgrade", self.identity(name))
        return base64.b64decode(result["content"])

    def ballot_table(self, ballot_id):
        ballot = self._get(f"/ballot/{ballot_id}")
        upgrade_file = self._get(f"/ballot/{ballot_id}/upgrade-file")
        rows = [
            ["Phase", ballot["phase"]],
            ["Threshold", ballot["threshold"]],
            ["Registered voters", ballot["registered_voters"]],
            ["YES votes", ballot["yes_votes"]],
            ["NO votes", ballot["no_votes"]],
            ["Total votes", ballot["total_votes"]],
            ["Upgrade approved", ballot["upgrade_occurred"]],
            ["Upgrade applied", upgrade_file["applied"]],
        ]
        return tabulate(rows, headers=["Ballot", ballot_id], tablefmt="github")


def main_menu():
    client = ShareVoteClient()

    while True:
        print("\n===== ShareVote Client =====")
        print("1. Create identity")
        print("2. Create ballot")
        print("3. Distribute shares")
        print("4. Vote")
        print("5. Compute result")
        print("6. Apply upgrade")
        print("7. Show ballot")
        print("8. Exit")

        choice = input("> ")

        try:
            if choice == "1":
                identity = client.create_identity(input("Name: "))
                print(f"Account: {identity.account_id}")
            elif choice == "2":
                ballot = client.create_ballot(
                    input("Dealer name: "),
                    input("Upgrade content: ").encode('utf-8'),
                    int(input(f"Threshold (e.g., {config.Config.THRESHOLD}): ")),
                    int(input(f"Number of voters (e.g., {config.Config.TOTAL_VOTERS}): "))
                )
                print(f"Ballot ID: {ballot['ballot_id']}")
            elif choice == "3":
                ballot_id = input("Ballot ID: ")
                names = [n.strip() for n in input("Voter names (comma separated): ").split(",") if n.strip()]
                envelopes = client.distribute_shares(input("Dealer name: "), ballot_id, names)
                for name, envelope in envelopes.items():
                    voter = client.register_voter(name, ballot_id, envelope)
                    print(f"{name}: voter {voter['voter_id']} (x={voter['x']})")
            elif choice == "4":
                tally = client.vote(
                    input("Voter name: "),
                    input("Ballot ID: "),
                    input("Vote yes? (y/n): ").lower() == "y"
                )
                print(f"YES {tally['yes_votes']} / NO {tally['no_votes']}")
            elif choice == "5":
                tally = client.compute_result(input("Ballot ID: "))
                print("Upgrade approved" if tally["upgrade_occurred"] else "Upgrade rejected")
            elif choice == "6":
                content = client.apply_upgrade(input("Name: "), input("Ballot ID: "))
                print(f"Upgrade applied: {content.decode('utf-8', errors='replace')}")
            elif choice == "7":
                print(client.ballot_table(input("Ballot ID: ")))
            elif choice == "8":
                print("Exiting...")
                break
            else:
                print("Invalid choice")
        except (LedgerRequestError, KeyError, ValueError) as e:
            print(f"Request failed: {e}")
        except requests.exceptions.RequestException as e:
            print(f"Could not reach ledger at {client.ledger_url}: {e}")


if __name__ == "__main__":
    config.Config.ensure_data_dir()
    main_menu()
