from pipeline_parity.validation.session_runner import main

if __name__ == "__main__":
    raise SystemExit(main())
